#!/usr/bin/env python3
"""
CLI Router for the Actions Reporter.

Routes `<command> <subcommand>` invocations to the command classes.
"""

import argparse
import logging
import sys
from typing import Optional, List

from commands import get_command, COMMANDS
from core.config import get_config_manager
from core.ingestion.github_client import TIME_WINDOWS

logger = logging.getLogger(__name__)


class CLIRouter:
    """
    CLI router for actions reporter commands.

    Command structure:
    - python run.py runs fetch --repo owner/repo --window 7d
    - python run.py runs import actions.csv
    - python run.py report show --exclude-short-runs
    - python run.py order up "Build" --section main
    """

    def __init__(self, container=None):
        """
        Initialize CLI router.

        Args:
            container: Optional container passed to every command
        """
        self.container = container
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create the main argument parser."""
        parser = argparse.ArgumentParser(
            description="GitHub Actions run reporter",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=self._get_examples_text()
        )
        parser.add_argument('--verbose', '-v', action='store_true', help='Verbose logging')

        subparsers = parser.add_subparsers(
            dest='command',
            help='Available commands',
            metavar='{command}'
        )

        self._add_runs_parser(subparsers)
        self._add_report_parser(subparsers)
        self._add_order_parser(subparsers)

        return parser

    def _add_runs_parser(self, subparsers):
        """Add runs command parser."""
        runs_parser = subparsers.add_parser(
            'runs',
            help='Fetch, import, export and clear cached runs'
        )

        runs_subparsers = runs_parser.add_subparsers(
            dest='subcommand',
            help='Run operations',
            metavar='{fetch,import,export,clear,stats}'
        )

        fetch_parser = runs_subparsers.add_parser('fetch', help='Download workflow runs from GitHub')
        fetch_parser.add_argument('--repo', required=True, help='Repository as owner/repo')
        fetch_parser.add_argument('--window', choices=sorted(TIME_WINDOWS), default=None,
                                  help='Lookback window (default: DEFAULT_TIME_WINDOW or 24h)')
        fetch_parser.add_argument('--token', default=None, help='Personal access token (default: GITHUB_TOKEN)')

        import_parser = runs_subparsers.add_parser('import', help='Import runs from a CSV file')
        import_parser.add_argument('file', help='CSV file with a name,status,branch,timestamp,duration header')

        export_parser = runs_subparsers.add_parser('export', help='Export cached runs to CSV')
        export_parser.add_argument('--output-dir', default='.', help='Directory for the export file (default: .)')

        clear_parser = runs_subparsers.add_parser('clear', help='Delete all cached runs')
        clear_parser.add_argument('--force', action='store_true', help='Skip confirmation prompt')

        stats_parser = runs_subparsers.add_parser('stats', help='Show cached run statistics')
        stats_parser.add_argument('--limit', type=int, default=10, help='Recent runs to list (default: 10)')

    def _add_report_parser(self, subparsers):
        """Add report command parser."""
        report_parser = subparsers.add_parser(
            'report',
            help='Per-workflow runtime statistics'
        )

        report_subparsers = report_parser.add_subparsers(
            dest='subcommand',
            help='Report operations',
            metavar='{show}'
        )

        show_parser = report_subparsers.add_parser('show', help='Show the actions summary')
        show_parser.add_argument('--section', choices=['main', 'other', 'all'], default='all',
                                 help='Branch section to show (default: all)')
        show_parser.add_argument('--exclude-short-runs', action='store_true',
                                 help='Exclude runs shorter than 5%% of their workflow p90')
        show_parser.add_argument('--compact', action='store_true', help='One line per workflow')

    def _add_order_parser(self, subparsers):
        """Add order command parser."""
        order_parser = subparsers.add_parser(
            'order',
            help='Rearrange workflows in the report'
        )

        order_subparsers = order_parser.add_subparsers(
            dest='subcommand',
            help='Order operations',
            metavar='{up,down,show}'
        )

        for direction in ('up', 'down'):
            move_parser = order_subparsers.add_parser(direction, help=f'Move a workflow {direction} one place')
            move_parser.add_argument('name', help='Workflow name')
            move_parser.add_argument('--section', choices=['main', 'other'], default='main',
                                     help='Section the move applies to (default: main)')
            move_parser.add_argument('--exclude-short-runs', action='store_true',
                                     help='Use the section as shown with short runs excluded')

        order_subparsers.add_parser('show', help='Show the saved workflow order')

    def _get_examples_text(self) -> str:
        """Get examples text for help."""
        return """
Examples:
  python run.py runs fetch --repo octo-org/octo-repo --window 7d
  python run.py runs import actions_export_2024-05-01.csv
  python run.py runs export --output-dir exports/
  python run.py report show --exclude-short-runs
  python run.py order up "Build" --section main
  python run.py runs clear --force
"""

    def route_command(self, args: Optional[List[str]] = None) -> int:
        """
        Route command to appropriate handler.

        Args:
            args: Command line arguments (uses sys.argv if None)

        Returns:
            Exit code
        """
        try:
            if args is None:
                args = sys.argv[1:]

            parsed_args = self.parser.parse_args(args)

            if getattr(parsed_args, 'verbose', False):
                logging.getLogger().setLevel(logging.DEBUG)

            if not parsed_args.command:
                self.parser.print_help()
                return 1

            return self._handle_command(parsed_args)

        except SystemExit as e:
            # argparse calls sys.exit() on error or help
            return e.code if e.code is not None else 0
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
            return 130
        except Exception as e:
            logger.error(f"CLI routing error: {e}", exc_info=True)
            return 1

    def _handle_command(self, args: argparse.Namespace) -> int:
        """Handle command structure."""
        logger.debug(f"Handling command: {args.command}")

        if args.command not in COMMANDS:
            available = ', '.join(COMMANDS.keys())
            logger.error(f"Unknown command '{args.command}'. Available: {available}")
            return 1

        subcommand = getattr(args, 'subcommand', None)
        if not subcommand:
            logger.error(f"No subcommand specified for '{args.command}'")
            try:
                self.parser.parse_args([args.command, '--help'])
            except SystemExit:
                pass
            return 1

        command = get_command(args.command, self.container)
        return command.execute(subcommand, args)


def main(args: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        args: Command line arguments (uses sys.argv if None)

    Returns:
        Exit code
    """
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        get_config_manager().update_logging()
    except ValueError as e:
        logger.error(str(e))
        return 22

    router = CLIRouter()
    return router.route_command(args)


if __name__ == '__main__':
    sys.exit(main())
