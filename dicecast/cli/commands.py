#!/usr/bin/env python3
"""
Command-line interface for Dicecast.

Provides commands for parsing notation, rolling dice in a headless world,
inspecting die geometry and serving the web API from the terminal.
"""

import argparse
import json
import sys

from ..core.config import get_config
from ..core.logging_config import setup_logging
from ..engine import roll_headless
from ..geometry import UnsupportedDieType, get_descriptor
from ..notation import DiceParser


def cmd_parse(args):
    """Parse notation and show its groups."""
    spec = DiceParser.parse(args.notation)

    if args.json:
        print(json.dumps(spec.to_dict(), indent=2))
        return

    if spec.is_empty and spec.modifier == 0:
        print(f"✗ Nothing to roll in '{args.notation}'", file=sys.stderr)
        sys.exit(1)

    print(f"✓ {spec.to_notation()}")
    for group in spec.groups:
        dice = ' + '.join(group.die_types())
        print(f"  {str(group):12} {group.dice} x {dice}")
    if spec.modifier:
        print(f"  Modifier: {spec.modifier:+d}")
    print(f"  Dice to throw: {spec.dice_count()}")


def cmd_roll(args):
    """Roll notation to completion in a headless world."""
    try:
        config = get_config()
        dice = DiceParser.parse(args.notation).dice_count()
        if dice > config.max_dice:
            print(f"✗ Too many dice: {dice} (max {config.max_dice})", file=sys.stderr)
            sys.exit(1)

        result = roll_headless(args.notation, seed=args.seed, config=config)

        if result is None:
            print(f"✗ Dice did not settle within {config.max_frames} frames", file=sys.stderr)
            sys.exit(1)

        if args.json:
            print(json.dumps(result.to_dict(), indent=2))
            return

        print(f"✓ {result.notation}: {result.total}")
        print(f"  {result.describe()}")
    except ValueError as e:
        print(f"✗ Error: {e}", file=sys.stderr)
        sys.exit(1)


def cmd_inspect(args):
    """Show the geometry and labels of a die type."""
    try:
        descriptor = get_descriptor(args.die_type)
    except UnsupportedDieType as e:
        print(f"✗ Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.json:
        print(json.dumps(descriptor.to_dict(include_mesh=args.mesh), indent=2))
        return

    mesh = descriptor.render_mesh
    print(f"Die: {descriptor.name}")
    print(f"  Radius: {descriptor.radius}")
    print(f"  Chamfer: {descriptor.chamfer}")
    print(f"  Value faces: {descriptor.value_face_count}")
    print(f"  Bevel faces: {descriptor.bevel_face_count}")
    print(f"  Render mesh: {len(mesh.vertices)} vertices, {len(mesh.triangles)} triangles")
    if descriptor.reads_from_top_vertex:
        print(f"  Read from: top corner (missing number of the face on the table)")
    print(f"\n  Faces:")
    for index, label in enumerate(descriptor.labels.labels):
        normal = ', '.join(f"{c:+.3f}" for c in descriptor.normals[index])
        print(f"    {index:2}  {label.text:8}  ({normal})")


def cmd_serve(args):
    """Run the web API."""
    from ..web.server import run_server

    config = get_config()
    run_server(args.host or config.host, args.port or config.port,
               args.debug or config.debug, config)


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description='Dicecast - physically rolled polyhedral dice'
    )
    parser.add_argument('--log-level', default=None, type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help='Log level (default: LOG_LEVEL or INFO)')
    parser.add_argument('--quiet-physics', action='store_true',
                        help='Hide per-body debug lines from the physics world')
    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # ========== parse command ==========
    parser_parse = subparsers.add_parser('parse', help='Parse roll notation')
    parser_parse.add_argument('notation', help='Notation, e.g. 2d20+3d6kh2-4')
    parser_parse.add_argument('--json', action='store_true', help='Output JSON')
    parser_parse.set_defaults(func=cmd_parse)

    # ========== roll command ==========
    parser_roll = subparsers.add_parser('roll', help='Roll dice in a headless world')
    parser_roll.add_argument('notation', help='Notation, e.g. 2d20+3d6kh2-4')
    parser_roll.add_argument('--seed', type=int, default=None, help='Seed for the throw')
    parser_roll.add_argument('--json', action='store_true', help='Output JSON')
    parser_roll.set_defaults(func=cmd_roll)

    # ========== inspect command ==========
    parser_inspect = subparsers.add_parser('inspect', help='Show die geometry')
    parser_inspect.add_argument('die_type', help='Die type, e.g. d20')
    parser_inspect.add_argument('--json', action='store_true', help='Output JSON')
    parser_inspect.add_argument('--mesh', action='store_true',
                                help='Include render mesh and collision hull in JSON output')
    parser_inspect.set_defaults(func=cmd_inspect)

    # ========== serve command ==========
    parser_serve = subparsers.add_parser('serve', help='Run the web API')
    parser_serve.add_argument('--host', default=None, help='Host to bind to')
    parser_serve.add_argument('--port', type=int, default=None, help='Port to bind to')
    parser_serve.add_argument('--debug', action='store_true', help='Enable debug mode')
    parser_serve.set_defaults(func=cmd_serve)

    # Parse and execute
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = get_config()
    logger_levels = {'dicecast.physics': 'INFO'} if args.quiet_physics else None
    try:
        setup_logging(level=args.log_level or config.log_level, log_file=config.log_file,
                      logger_levels=logger_levels)
    except ValueError as e:
        print(f"✗ Error: {e}", file=sys.stderr)
        sys.exit(1)

    args.func(args)


if __name__ == '__main__':
    main()
