#!/usr/bin/env python3
"""CLI entry point for the Tennis Court Physics Simulation.

Usage:
    python main.py play              Launch Pygame visualizer
    python main.py drop              Run the four-court drop test and print a summary
    python main.py rally [surface]   Play a rally on one court in the terminal
                                     (--auto accepts the default return every time)
    python main.py analyze           Generate comparison charts
    python main.py test              Run all tests

Options:
    --verbose        Debug logging
    --config PATH    JSON settings file merged over the defaults
"""

import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))


def setup_logging(verbose: bool = False):
    """Configure logging for the application."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _pop_option(args, name):
    """Remove ``name VALUE`` from args and return VALUE (or None)."""
    if name not in args:
        return None
    i = args.index(name)
    if i + 1 >= len(args):
        print(f"Missing value for {name}")
        sys.exit(1)
    value = args[i + 1]
    del args[i:i + 2]
    return value


def _load(args):
    from tennis_engine.config import load_config
    return load_config(_pop_option(args, "--config"))


def cmd_play(args):
    """Launch the Pygame visualizer."""
    config = _load(args)
    print("Launching Tennis Court Visualizer...")
    print("Controls: SPACE=start  R=reset  M=mode  1-4=court  LEFT/RIGHT=move  Q=quit")
    print("-" * 60)
    from tennis_sim.visualizer import run_visualizer
    run_visualizer(config)


def cmd_drop(args):
    """Drop a ball on every court and print bounce stats."""
    config = _load(args)
    from tennis_sim.console import drop_report, format_drop_report

    print("=" * 60)
    print("  DROP TEST -- 4 COURT SURFACES")
    print("=" * 60)
    print()
    print(format_drop_report(drop_report(config)))
    print("=" * 60)


def cmd_rally(args):
    """Play shots on one court, asking for returns in the terminal."""
    config = _load(args)
    from tennis_engine.player import Accepted, ScriptedReturnShots
    from tennis_engine.types import SURFACES, ShotParameters, SurfaceType
    from tennis_sim.console import ConsoleReturnShotDialog, run_rally

    auto = "--auto" in args
    names = [t.value for t in SurfaceType]
    positional = [a for a in args if not a.startswith("--")]
    surface = SurfaceType(positional[0]) if positional and positional[0] in names else SurfaceType.CLAY

    if auto:
        defaults = Accepted(ShotParameters(
            force=config.default_force,
            angle=config.default_angle,
            spin=config.default_spin,
        ))
        return_shots = ScriptedReturnShots(fallback=defaults, config=config)
    else:
        return_shots = ConsoleReturnShotDialog(config)

    print("=" * 60)
    print(f"  RALLY -- {SURFACES[surface].name}")
    print("=" * 60)
    summary = run_rally(config, return_shots, surface)

    print()
    print(f"  Clock:          {summary.duration:.1f}s")
    print(f"  Shots launched: {summary.launches}")
    print(f"  Returns:        {summary.returns}  |  Cancelled: {summary.cancellations}")
    print(f"  Net hits:       {summary.net_hits}")
    print(f"  Bounces:        {summary.bounces}")
    print(f"  Came to rest:   {summary.rests}  |  Out of court: {summary.outs}")
    print()
    print("  Available courts: " + ", ".join(names))
    print("  Usage: python main.py rally [court] [--auto]")
    print("=" * 60)


def cmd_analyze(args):
    """Generate all analysis charts."""
    print("Generating analysis charts...")
    print("-" * 60)
    from tennis_sim.analysis import generate_all_charts
    output_dir = os.path.join(os.path.dirname(os.path.abspath(__file__)), "output")
    paths = generate_all_charts(output_dir=output_dir)
    print(f"\nDone! {len(paths)} charts saved to {output_dir}/")


def cmd_test(args):
    """Run all tests."""
    import subprocess
    print("Running tests...")
    print("-" * 60)
    result = subprocess.run(
        [sys.executable, "-m", "pytest", "tests/", "-v"],
        cwd=os.path.dirname(os.path.abspath(__file__)),
    )
    sys.exit(result.returncode)


COMMANDS = {
    "play": cmd_play,
    "drop": cmd_drop,
    "rally": cmd_rally,
    "analyze": cmd_analyze,
    "test": cmd_test,
}


def main():
    args = sys.argv[1:]
    verbose = "--verbose" in args
    if verbose:
        args.remove("--verbose")

    if not args or args[0] not in COMMANDS:
        print(__doc__)
        print("Available commands:")
        for name, func in COMMANDS.items():
            print(f"  {name:12s} {func.__doc__}")
        sys.exit(1)

    setup_logging(verbose)
    COMMANDS[args[0]](args[1:])


if __name__ == "__main__":
    main()
