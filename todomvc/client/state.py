"""
TodoMVC — Client State Store
==============================

What:  The client's mirror of the entry list plus UI state: the active
       filter, the new-entry input buffer and the edit buffer.
How:   Every index-based mutation addresses the n-th entry *among those the
       current filter admits*, never the n-th entry of the raw list.

Example:
    entries = [A (active), B (completed), C (active)], filter = Active
    remove(1) removes C.
"""

import enum
from dataclasses import dataclass, field
from typing import List, Tuple

from todomvc.schemas.task import Entry


class Filter(enum.Enum):
    """Which entries the view shows and index-based operations address."""

    ALL = "All"
    ACTIVE = "Active"
    COMPLETED = "Completed"

    def fits(self, entry: Entry) -> bool:
        if self is Filter.ACTIVE:
            return not entry.completed
        if self is Filter.COMPLETED:
            return entry.completed
        return True

    @property
    def href(self) -> str:
        return _HREFS[self]

    @classmethod
    def from_href(cls, href: str) -> "Filter":
        """Filter for a location hash such as `#/active`; unknown hashes mean All."""
        for flt, value in _HREFS.items():
            if value == href:
                return flt
        return cls.ALL

    def __str__(self) -> str:
        return self.value


_HREFS = {
    Filter.ALL: "#/",
    Filter.ACTIVE: "#/active",
    Filter.COMPLETED: "#/completed",
}


@dataclass
class State:
    entries: List[Entry] = field(default_factory=list)
    filter: Filter = Filter.ALL
    value: str = ""
    edit_value: str = ""

    # ── Queries ───────────────────────────────────────────────────────────

    def total(self) -> int:
        return len(self.entries)

    def total_completed(self) -> int:
        return sum(1 for e in self.entries if Filter.COMPLETED.fits(e))

    def total_active(self) -> int:
        return sum(1 for e in self.entries if Filter.ACTIVE.fits(e))

    def visible(self) -> List[Entry]:
        """Entries admitted by the current filter, in list order."""
        return [e for e in self.entries if self.filter.fits(e)]

    def is_all_completed(self) -> bool:
        """True when the filtered view is non-empty and every entry in it is completed."""
        visible = self.visible()
        return bool(visible) and all(e.completed for e in visible)

    # ── Filtered indexing ─────────────────────────────────────────────────

    def _raw_index(self, idx: int) -> int:
        positions = [i for i, e in enumerate(self.entries) if self.filter.fits(e)]
        if not 0 <= idx < len(positions):
            raise IndexError(
                f"filtered index {idx} out of range for {len(positions)} "
                f"{self.filter.value.lower()} entries"
            )
        return positions[idx]

    def entry_at(self, idx: int) -> Entry:
        return self.entries[self._raw_index(idx)]

    # ── Mutations ─────────────────────────────────────────────────────────

    def toggle(self, idx: int) -> Entry:
        entry = self.entry_at(idx)
        entry.completed = not entry.completed
        return entry

    def toggle_all(self, value: bool) -> None:
        for entry in self.visible():
            entry.completed = value

    def clear_all_edit(self) -> None:
        for entry in self.visible():
            entry.editing = False

    def toggle_edit(self, idx: int) -> Entry:
        """Leave edit mode on every other entry, then flip it on the target."""
        entry = self.entry_at(idx)
        was_editing = entry.editing
        self.clear_all_edit()
        entry.editing = not was_editing
        return entry

    def complete_edit(self, idx: int, val: str) -> Tuple[Entry, bool]:
        """
        Finish editing the entry at `idx`.

        Returns the entry and whether it was removed; empty content removes it.
        """
        if not val:
            return self.remove(idx), True
        entry = self.entry_at(idx)
        entry.content = val
        entry.editing = False
        return entry, False

    def remove(self, idx: int) -> Entry:
        return self.entries.pop(self._raw_index(idx))

    def clear_completed(self) -> List[Entry]:
        """Drop completed entries from the mirror and return them."""
        removed = [e for e in self.entries if Filter.COMPLETED.fits(e)]
        self.entries = [e for e in self.entries if Filter.ACTIVE.fits(e)]
        return removed
