"""
Working set of parsed entries while the user reviews them.
"""

from dataclasses import replace
from typing import Iterable, Iterator, List

from card_creator.structures import Entry

EDITABLE_FIELDS = ("original", "translated")


class EntryEditor:
    """Holds entries with per-entry selection and edit state."""

    def __init__(self, entries: Iterable[Entry] = ()):
        # All entries start selected.
        self._entries: List[Entry] = [replace(entry, selected=True) for entry in entries]

    def _check_index(self, index: int):
        if not isinstance(index, int) or not 0 <= index < len(self._entries):
            raise IndexError(f"Entry index {index} out of range (0..{len(self._entries) - 1})")

    def toggle(self, index: int) -> bool:
        """Flip inclusion of one entry and return its new state."""
        self._check_index(index)
        entry = self._entries[index]
        entry.selected = not entry.selected
        return entry.selected

    def set_field(self, index: int, field: str, value: str):
        """Replace the original or translated text of one entry."""
        self._check_index(index)
        if field not in EDITABLE_FIELDS:
            raise ValueError(f"Unknown entry field '{field}', expected one of {EDITABLE_FIELDS}")
        setattr(self._entries[index], field, value)

    def selected_entries(self) -> List[Entry]:
        """Entries currently marked for inclusion, in order."""
        return [entry for entry in self._entries if entry.selected]

    def select_all(self):
        for entry in self._entries:
            entry.selected = True

    def deselect_all(self):
        for entry in self._entries:
            entry.selected = False

    @property
    def selected_count(self) -> int:
        return sum(1 for entry in self._entries if entry.selected)

    @property
    def entries(self) -> List[Entry]:
        """Copy of the full working set."""
        return [replace(entry) for entry in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> Entry:
        self._check_index(index)
        return self._entries[index]
