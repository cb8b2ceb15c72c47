#!/usr/bin/env python3
"""
Order command endpoints for rearranging workflows in the report.
"""

import logging
from argparse import Namespace

from .base import BaseCommand

logger = logging.getLogger(__name__)


class OrderCommand(BaseCommand):
    """Move workflows up or down and inspect the saved order."""

    def execute(self, subcommand: str, args: Namespace) -> int:
        """Execute order subcommand."""
        try:
            if subcommand in ("up", "down"):
                return self.move(subcommand, args)
            elif subcommand == "show":
                return self.show(args)
            else:
                return self.unknown_subcommand(subcommand)

        except Exception as e:
            return self.handle_error(e, f"order {subcommand}")

    def move(self, direction: str, args: Namespace) -> int:
        """Move a workflow one place within a report section."""
        report = self.build_report(getattr(args, 'exclude_short_runs', False))
        visible = report.section(args.section)

        if args.name not in [group.name for group in visible]:
            self.logger.error(f"Workflow '{args.name}' is not shown in the {args.section} section")
            return 1

        if not self.global_order.move_within_list(args.name, direction, visible):
            print(f"↔️  '{args.name}' is already {'first' if direction == 'up' else 'last'} in the {args.section} section")
            return 0

        reordered = self.global_order.sort(visible)
        print(f"✅ Moved '{args.name}' {direction}")
        for position, group in enumerate(reordered, 1):
            print(f"{position:>3}. {group.name}")
        return 0

    def show(self, args: Namespace) -> int:
        """Print the saved workflow order."""
        names = self.global_order.names
        if not names:
            print("No saved order; workflows are shown in first-seen order.")
            return 0

        print(f"\n=== Saved Workflow Order ===")
        for position, name in enumerate(names, 1):
            print(f"{position:>3}. {name}")
        return 0
