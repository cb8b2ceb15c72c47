#!/usr/bin/env python3
"""
Runs command endpoints: fetch, import, export, clear and inspect stored runs.
"""

import logging
from argparse import Namespace

from .base import BaseCommand
from core.formatters import format_run
from core.ingestion import fetch_runs_sync, load_runs_csv

logger = logging.getLogger(__name__)


class RunsCommand(BaseCommand):
    """Handle run ingestion and storage operations."""

    def execute(self, subcommand: str, args: Namespace) -> int:
        """Execute runs subcommand."""
        try:
            if subcommand == "fetch":
                return self.fetch(args)
            elif subcommand == "import":
                return self.import_file(args)
            elif subcommand == "export":
                return self.export(args)
            elif subcommand == "clear":
                return self.clear(args)
            elif subcommand == "stats":
                return self.stats(args)
            else:
                return self.unknown_subcommand(subcommand)

        except Exception as e:
            return self.handle_error(e, f"runs {subcommand}")

    def fetch(self, args: Namespace) -> int:
        """Fetch runs from GitHub and merge them into the store."""
        github = self.config.github
        token = getattr(args, 'token', None) or github.token
        time_window = getattr(args, 'window', None) or self.config.app.default_time_window

        def report_progress(processed: int, total: int) -> None:
            print(f"⏳ Processing {processed}/{total} runs...")

        records = fetch_runs_sync(
            token=token,
            repo=args.repo,
            time_window=time_window,
            api_url=github.api_url,
            timeout=github.request_timeout,
            page_size=github.page_size,
            batch_size=github.batch_size,
            progress=report_progress
        )

        merged = self.run_store.merge(records)
        print(f"✅ Fetched {len(records)} runs from {args.repo} ({time_window})")
        print(f"💾 Cached runs: {len(merged)}")
        return 0

    def import_file(self, args: Namespace) -> int:
        """Import runs from a CSV file and merge them into the store."""
        records = load_runs_csv(args.file)
        merged = self.run_store.merge(records)
        print(f"✅ Imported {len(records)} runs from {args.file}")
        print(f"💾 Cached runs: {len(merged)}")
        return 0

    def export(self, args: Namespace) -> int:
        """Export stored runs to a dated CSV file."""
        output_dir = getattr(args, 'output_dir', None) or '.'
        path = self.run_store.export_csv(output_dir)
        if path is None:
            print("No cached runs to export")
            return 0

        print(f"📤 Exported runs to {path}")
        return 0

    def clear(self, args: Namespace) -> int:
        """Remove all stored runs; the workflow order is kept."""
        if not getattr(args, 'force', False):
            print("⚠️  This will delete all cached runs")
            confirm = input("Are you sure? (yes/no): ").lower().strip()
            if confirm != 'yes':
                print("❌ Clear cancelled")
                return 0

        removed = self.run_store.count()
        self.run_store.clear()
        print(f"✅ Cleared {removed} cached runs")
        return 0

    def stats(self, args: Namespace) -> int:
        """Show what is currently cached."""
        records = self.run_store.load()

        print(f"\n=== Cached Runs ===")
        print(f"💾 Cached runs: {len(records)}")
        if not records:
            return 0

        workflows = {record.name for record in records}
        branches = {record.branch for record in records}
        print(f"📊 Workflows: {len(workflows)}")
        print(f"🌿 Branches: {len(branches)}")
        print(f"🕐 Date range: {records[-1].created_at:%Y-%m-%d %H:%M} to {records[0].created_at:%Y-%m-%d %H:%M}")

        limit = getattr(args, 'limit', 10)
        print(f"\n=== Most Recent Runs ===")
        for record in records[:limit]:
            print(format_run(record))

        if len(records) > limit:
            print(f"\n... and {len(records) - limit} more runs")
        return 0
