#!/usr/bin/env python3
"""
Deduplicating run store.

Owns the persisted set of run records: merges new records by identity,
keeps the set newest-first, and exports it as CSV.
"""

import csv
import json
import logging
from datetime import date
from pathlib import Path
from typing import Iterable, List, Optional, Union

from core.exceptions import RecordValidationError, StorageParseError
from core.kv_store import KeyValueStore
from core.models.run import KNOWN_FIELDS, RunRecord

logger = logging.getLogger(__name__)

RECORDS_SLOT = 'actions_reporter_data'
EXPORT_PREFIX = 'actions_export_'


def sort_newest_first(records: Iterable[RunRecord]) -> List[RunRecord]:
    """Sort records by creation time, newest first (stable for ties)."""
    return sorted(records, key=lambda record: record.created_at, reverse=True)


class RunStore:
    """Persists run records in a single key-value slot."""

    def __init__(self, kv_store: KeyValueStore, slot: str = RECORDS_SLOT):
        """
        Initialize run store.

        Args:
            kv_store: Durable key-value capability
            slot: Slot name holding the serialized records
        """
        self.kv_store = kv_store
        self.slot = slot

    def load(self) -> List[RunRecord]:
        """
        Load the persisted records, newest first.

        Returns an empty list when nothing is stored or storage is unavailable.

        Raises:
            StorageParseError: If the stored text is corrupt
        """
        stored = self.kv_store.get(self.slot)
        if not stored:
            return []

        try:
            payload = json.loads(stored)
            if not isinstance(payload, list):
                raise ValueError(f"expected a list, got {type(payload).__name__}")
            records = [RunRecord.from_dict(item) for item in payload]
        except (ValueError, TypeError, RecordValidationError) as e:
            raise StorageParseError(self.slot, e) from e

        return sort_newest_first(records)

    def merge(self, new_records: Iterable[RunRecord]) -> List[RunRecord]:
        """
        Merge new records into the persisted set and persist the result.

        Records are keyed by identity; on collision the new record wins.

        Returns:
            The merged set, newest first
        """
        by_key = {record.key: record for record in self.load()}
        before = len(by_key)

        added = 0
        replaced = 0
        for record in new_records:
            if record.key in by_key:
                replaced += 1
            else:
                added += 1
            by_key[record.key] = record

        merged = sort_newest_first(by_key.values())
        self._save(merged)

        logger.info(f"Merged runs: {before} stored, {added} added, {replaced} replaced, {len(merged)} total")
        return merged

    def clear(self) -> None:
        """Remove the persisted set entirely."""
        self.kv_store.delete(self.slot)
        logger.info("Cleared stored runs")

    def count(self) -> int:
        """Number of persisted records."""
        return len(self.load())

    def export_csv(self, directory: Union[str, Path] = '.', today: Optional[date] = None) -> Optional[Path]:
        """
        Export the persisted set to ``actions_export_<date>.csv``.

        Args:
            directory: Output directory (created if missing)
            today: Date used in the file name (defaults to today)

        Returns:
            Path of the written file, or None when the store is empty
        """
        records = self.load()
        if not records:
            logger.info("No stored runs to export")
            return None

        today = today or date.today()
        output_dir = Path(directory)
        output_dir.mkdir(parents=True, exist_ok=True)
        path = output_dir / f"{EXPORT_PREFIX}{today.isoformat()}.csv"

        extra_columns = sorted({key for record in records for key in record.extra})
        fieldnames = list(KNOWN_FIELDS) + extra_columns

        with open(path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            for record in records:
                row = {key: ('' if value is None else value) for key, value in record.to_dict().items()}
                writer.writerow(row)

        logger.info(f"Exported {len(records)} runs to {path}")
        return path

    def _save(self, records: List[RunRecord]) -> None:
        payload = json.dumps([record.to_dict() for record in records], ensure_ascii=False)
        self.kv_store.set(self.slot, payload)
