"""Draft/saved mapping sets for an editing session."""
import logging
from typing import Optional

from feedmap.mapper.mapping import Mapping, MappingSet

logger = logging.getLogger(__name__)


class MappingSession:
    """Holds a draft mapping set apart from the last saved one."""

    def __init__(self, saved: Optional[MappingSet] = None):
        self._saved = saved.copy() if saved is not None else MappingSet()
        self.draft = self._saved.copy()

    @property
    def saved(self) -> MappingSet:
        return self._saved.copy()

    @property
    def has_unsaved_changes(self) -> bool:
        return self.draft != self._saved

    def set_mapping(self, mapping: Mapping) -> None:
        """Add or replace a mapping in the draft."""
        self.draft.put(mapping)

    def remove_mapping(self, target_field: str) -> None:
        self.draft.remove(target_field)

    def save(self) -> MappingSet:
        """Commit the draft and return a snapshot of it."""
        self._saved = self.draft.copy()
        logger.info(f"Saved {len(self._saved)} mappings")
        return self._saved.copy()

    def discard(self) -> None:
        """Revert the draft to the last saved snapshot."""
        self.draft = self._saved.copy()
        logger.info("Discarded unsaved mapping changes")
