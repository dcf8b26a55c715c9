#!/usr/bin/env python3
"""
Example Graphite Chamber Simulation

This script demonstrates how to use the graphite_reactor package
to start up a chamber, run it on a periodic scheduler and watch it
heat its coolant.

Usage:
    python run_simulation.py [--fuel FUEL] [--control CONTROL] [--ticks TICKS]

Example:
    python run_simulation.py --fuel 6 --control 2 --depth 0.4 --ticks 120
"""

import argparse
import logging
import sys
import os

# Add parent directory to path for importing graphite_reactor
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from graphite_reactor import events
from graphite_reactor.reactor import create_reactor_core
from graphite_reactor.rods import ControlRod, FuelRod, ReactorPipe, StarterRod
from graphite_reactor.scheduler import PeriodicScheduler
from graphite_reactor.thermal import CoolantMix


def build_chamber(fuel: int, control: int, depth: float, seed: int, scheduler=None):
    """
    Assemble a chamber with a starter rod, fuel and control rods and a pipe.

    Args:
        fuel: Number of fuel rods
        control: Number of control rods
        depth: Control rod depth
        seed: Seed of the spontaneous neutron generator
        scheduler: Optional scheduler ticking the chamber
    """
    reactor = create_reactor_core(
        core_id="chamber-1",
        seed=seed,
        fluid=CoolantMix(total_moles=2000.0),
        scheduler=scheduler,
    )
    reactor.consoles.connect("console-1")

    reactor.insert_pipe(ReactorPipe())
    reactor.insert_rod(StarterRod())
    for _ in range(fuel):
        reactor.insert_rod(FuelRod())
    for _ in range(control):
        reactor.insert_rod(ControlRod())
    reactor.set_control_rod_depth(depth)
    return reactor


def run_startup(fuel: int, control: int, depth: float, ticks: int, seed: int):
    """
    Start the chamber and run it for a number of scheduled ticks.

    Args:
        fuel: Number of fuel rods
        control: Number of control rods
        depth: Control rod depth
        ticks: Number of one second ticks to run
        seed: Seed of the spontaneous neutron generator
    """
    print("\n" + "="*70)
    print("       GRAPHITE CHAMBER SIMULATION")
    print(f"       {fuel} fuel rods, {control} control rods at depth {depth:.2f}")
    print("="*70)

    scheduler = PeriodicScheduler()
    reactor = build_chamber(fuel, control, depth, seed, scheduler)

    for name in (events.MELTED_DOWN, events.PIPES_RUPTURED, events.EXPLODED):
        reactor.subscribe(name, lambda core_id, name=name: print(f"\n  !! {core_id}: {name}"))

    print("\nRunning chamber...")
    print(f"\n{'Tick':>6} {'Neutrons':>12} {'k':>10} {'Energy [J]':>12} {'T [K]':>10} {'Pressure':>12}")
    print("-" * 66)

    step = max(ticks // 10, 1)
    for tick in range(1, ticks + 1):
        scheduler.advance(1.0)
        if reactor.torn_down:
            break
        if tick % step == 0:
            print(
                f"{tick:>6d} {reactor.present_neutrons:>12.3e} {reactor.k_factor:>10.5f} "
                f"{reactor.energy_released:>12.3e} {reactor.temperature:>10.1f} "
                f"{reactor.current_pressure:>12.1f}"
            )

    reactor.print_summary()

    return reactor


def run_depth_study(fuel: int, control: int, seed: int):
    """
    Compare the multiplication factor for several control rod depths.
    """
    print("\n" + "="*70)
    print("       CONTROL ROD DEPTH STUDY")
    print("="*70)

    print(f"\n{'Depth':>10} {'k':>12} {'Neutrons after 30 s':>22}")
    print("-" * 46)

    for depth in (0.1, 0.25, 0.5, 0.75, 1.0):
        reactor = build_chamber(fuel, control, depth, seed)
        for _ in range(30):
            reactor.tick()
        print(f"{depth:>10.2f} {reactor.k_factor:>12.5f} {reactor.present_neutrons:>22.3e}")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Graphite Chamber Simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                          # Run startup with defaults
  %(prog)s --fuel 12 --control 1 --depth 0.1
  %(prog)s --study depth            # Compare control rod depths
        """
    )

    parser.add_argument(
        "--fuel",
        type=int,
        default=6,
        help="Number of fuel rods (default: 6)"
    )
    parser.add_argument(
        "--control",
        type=int,
        default=2,
        help="Number of control rods (default: 2)"
    )
    parser.add_argument(
        "--depth",
        type=float,
        default=0.5,
        help="Control rod depth (default: 0.5, range: 0.1-1.0)"
    )
    parser.add_argument(
        "--ticks",
        type=int,
        default=60,
        help="Number of one second ticks (default: 60)"
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=1,
        help="Random seed (default: 1)"
    )
    parser.add_argument(
        "--study",
        choices=["depth"],
        help="Run specific study type"
    )
    parser.add_argument(
        "--output",
        type=str,
        help="Output JSON file path"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log every tick"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    # One slot is taken by the starter rod
    if args.fuel + args.control > 15:
        print(f"Error: At most 15 fuel and control rods fit, got {args.fuel + args.control}")
        sys.exit(1)

    try:
        if args.study == "depth":
            run_depth_study(args.fuel, args.control, args.seed)
        else:
            reactor = run_startup(args.fuel, args.control, args.depth, args.ticks, args.seed)

            if args.output:
                reactor.to_json(args.output)
                print(f"\nResults exported to: {args.output}")

    except Exception as e:
        print(f"\nError during simulation: {e}")
        raise


if __name__ == "__main__":
    main()
