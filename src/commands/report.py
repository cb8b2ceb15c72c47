#!/usr/bin/env python3
"""
Report command endpoints for per-workflow runtime statistics.
"""

import logging
from argparse import Namespace

from .base import BaseCommand
from core.formatters import format_report

logger = logging.getLogger(__name__)


class ReportCommand(BaseCommand):
    """Show workflow statistics grouped by branch."""

    def execute(self, subcommand: str, args: Namespace) -> int:
        """Execute report subcommand."""
        try:
            if subcommand == "show":
                return self.show(args)
            else:
                return self.unknown_subcommand(subcommand)

        except Exception as e:
            return self.handle_error(e, f"report {subcommand}")

    def show(self, args: Namespace) -> int:
        """Print the actions summary for the selected sections."""
        report = self.build_report(getattr(args, 'exclude_short_runs', False))
        if report.total_runs == 0 and report.excluded_runs == 0:
            print("No cached runs. Fetch or import runs first.")
            return 0

        section = getattr(args, 'section', 'all')
        sections = ('main', 'other') if section == 'all' else (section,)
        print(format_report(
            report,
            sections,
            details=not getattr(args, 'compact', False),
            short_run_ratio=self.config.app.short_run_ratio
        ))
        return 0
