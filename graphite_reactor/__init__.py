"""
Graphite Reactor Chamber Package

A tick-based simulation of a graphite-moderated fission chamber: neutron
kinetics, control rod absorption, fuel rod energy release, coolant pressure
and the chamber's failure states (melt-down, pipe rupture, explosion).

Modules:
    - constants: Tuned chamber constants
    - rods: Fuel, control and starter rods, reactor pipe
    - registry: Rod and pipe slots
    - neutronics: Neutron population kinetics
    - fission: Fuel rod energy conversion
    - thermal: Coolant heating, pressure and boil-off
    - safety: Failure state machine
    - scheduler: Periodic tick scheduler
    - collaborators: Contracts of the surrounding world
    - reactor: Chamber model integrating all components
"""

from .constants import ReactorConstants
from .errors import (
    InvalidOperation,
    PipeOccupied,
    ReactorError,
    SlotFull,
    StarterNotReady,
)
from .rods import ControlRod, FuelRod, ReactorPipe, Rod, RodType, StarterRod
from .registry import RodRegistry
from .neutronics import NeutronKinetics
from .fission import FuelEnergyConverter
from .thermal import CoolantMix, ThermalPressureCoupler
from .safety import ReactorSafetyState, SafetyStateMachine
from .scheduler import PeriodicScheduler
from .reactor import ReactorCore, create_reactor_core

__version__ = "1.0.0"
__author__ = "Nuclear Engineering Model"

__all__ = [
    "ReactorConstants",
    "ReactorError",
    "SlotFull",
    "PipeOccupied",
    "StarterNotReady",
    "InvalidOperation",
    "Rod",
    "RodType",
    "FuelRod",
    "ControlRod",
    "StarterRod",
    "ReactorPipe",
    "RodRegistry",
    "NeutronKinetics",
    "FuelEnergyConverter",
    "CoolantMix",
    "ThermalPressureCoupler",
    "ReactorSafetyState",
    "SafetyStateMachine",
    "PeriodicScheduler",
    "ReactorCore",
    "create_reactor_core",
]
