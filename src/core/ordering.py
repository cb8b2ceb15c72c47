#!/usr/bin/env python3
"""
Persisted display order of workflow names.

One ordered sequence of names is shared by every view (main branch and
other branches). Views never keep their own copy: they project through
``GlobalOrder.sort`` and reorder through ``GlobalOrder.move_within_list``.
"""

import json
import logging
from enum import Enum
from typing import List, Sequence, Union

from core.exceptions import StorageParseError
from core.kv_store import KeyValueStore
from core.models.stats import WorkflowGroup

logger = logging.getLogger(__name__)

ORDER_SLOT = 'actions_order'


class MoveDirection(Enum):
    UP = 'up'
    DOWN = 'down'


class GlobalOrder:
    """
    Cross-view ordering of workflow names backed by a key-value slot.

    The order starts empty and grows lazily as names are moved. Every
    mutation rewrites the whole slot.
    """

    def __init__(self, kv_store: KeyValueStore, slot: str = ORDER_SLOT):
        self.kv_store = kv_store
        self.slot = slot
        self._names: List[str] = []
        self.reload()

    @property
    def names(self) -> List[str]:
        """Copy of the current order."""
        return list(self._names)

    def reload(self) -> None:
        """Re-read the order from storage."""
        stored = self.kv_store.get(self.slot)
        if not stored:
            self._names = []
            return

        try:
            names = json.loads(stored)
            if not isinstance(names, list) or not all(isinstance(name, str) for name in names):
                raise ValueError("expected a list of workflow names")
        except ValueError as e:
            raise StorageParseError(self.slot, e) from e

        self._names = names
        logger.debug(f"Loaded order of {len(names)} workflows")

    def sort(self, groups: Sequence[WorkflowGroup]) -> List[WorkflowGroup]:
        """
        Order groups by their position in the global order.

        Groups missing from the order go last, keeping their relative order.
        With an empty order the input order is returned unchanged.
        """
        if not self._names:
            return list(groups)

        positions = {name: index for index, name in enumerate(self._names)}
        missing = len(self._names)
        return sorted(groups, key=lambda group: positions.get(group.name, missing))

    def move_within_list(self, group_name: str, direction: Union[MoveDirection, str],
                         visible: Sequence[WorkflowGroup]) -> bool:
        """
        Move a workflow one step up or down within a visible list.

        The neighbour is taken from ``visible`` (what the user sees), then the
        two names swap places in the global order so the change carries over
        to every other view containing them.

        Args:
            group_name: Workflow to move
            direction: 'up' or 'down'
            visible: The list as currently displayed

        Returns:
            True if the order changed and was persisted
        """
        direction = MoveDirection(direction)
        visible_names = [group.name for group in visible]
        if group_name not in visible_names:
            logger.warning(f"Cannot move '{group_name}': not in the visible list")
            return False

        position = visible_names.index(group_name)
        if direction is MoveDirection.UP:
            if position == 0:
                return False
            target = visible_names[position - 1]
        else:
            if position == len(visible_names) - 1:
                return False
            target = visible_names[position + 1]

        order = list(self._names)
        for name in visible_names:
            if name not in order:
                order.append(name)

        if group_name not in order or target not in order:
            return False

        first, second = order.index(group_name), order.index(target)
        order[first], order[second] = order[second], order[first]

        self._names = order
        self._save()
        logger.info(f"Moved '{group_name}' {direction.value} past '{target}'")
        return True

    def _save(self) -> None:
        self.kv_store.set(self.slot, json.dumps(self._names, ensure_ascii=False))
