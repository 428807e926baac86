"""
PatraKosh Client - Main Entry Point

This is the main entry point for the PatraKosh client application.
Handles both GUI and CLI modes depending on command-line arguments.

Author: PatraKosh Project
"""

import sys
import argparse
from pathlib import Path

from version import VERSION


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for both modes."""
    from cli import add_cli_commands

    parser = argparse.ArgumentParser(
        prog='patrakosh',
        description='PatraKosh - Personal File Storage Client',
        epilog='Run without a command to launch GUI mode'
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {VERSION}')
    parser.add_argument('--config', type=Path,
                        help='Path to config.json (overrides PATRAKOSH_CONFIG)')

    subparsers = parser.add_subparsers(dest='command', metavar='command')
    add_cli_commands(subparsers)
    return parser


def main(argv=None):
    """
    Main entry point for PatraKosh client.

    Parses command-line arguments and launches either:
    - GUI mode (default when no command)
    - CLI mode (when a command such as list, upload or login is given)
    """
    args = build_parser().parse_args(argv)

    if args.command:
        # CLI mode
        from cli import run_cli_command
        return run_cli_command(args, args.config)
    else:
        # GUI mode
        from gui import launch_gui
        launch_gui(args.config)
        return 0


if __name__ == '__main__':
    sys.exit(main())
