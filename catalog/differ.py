from dataclasses import dataclass, field
from typing import List

from utils.logging_setup import get_logger

from .entry import Catalog, Entry, Header

logger = get_logger("catalog.differ")


@dataclass(frozen=True)
class DiffStat:
    added: int = 0
    changed: int = 0
    deleted: int = 0

    @property
    def total(self) -> int:
        return self.added + self.changed + self.deleted

    def __bool__(self):
        return self.total > 0


@dataclass
class DiffResult:
    """Counts and touched entries between two catalog snapshots."""
    stat: DiffStat
    entries: List[Entry] = field(default_factory=list)
    header: Header = field(default_factory=Header)

    def to_review_catalog(self) -> Catalog:
        """The added and changed entries as a catalog with the new header."""
        return Catalog(header=self.header, entries=list(self.entries))


def _sorted_by_key(entries: List[Entry]):
    # (index, entry) pairs so touched entries can be put back in source order
    return sorted(enumerate(entries), key=lambda pair: pair[1].key)


def diff_catalogs(old: Catalog, new: Catalog, include_obsolete: bool = False) -> DiffResult:
    """Compare two catalog snapshots.

    Both entry sequences are sorted by key (stable, so duplicate keys keep
    their relative order) and walked together. Entries whose key only
    exists in the new catalog are additions, keys only in the old catalog
    are deletions, and matching keys with different translation content
    are changes.

    Args:
        old: The earlier snapshot. An empty catalog makes every entry an addition.
        new: The later snapshot.
        include_obsolete: Compare obsolete entries too. They are skipped by
            default since they no longer take part in translation.

    Returns:
        DiffResult: Counts, the added and changed entries of `new` in their
            original order, and the header of `new`.
    """
    old_entries = old.entries if include_obsolete else old.active_entries()
    new_entries = new.entries if include_obsolete else new.active_entries()
    old_sorted = _sorted_by_key(old_entries)
    new_sorted = _sorted_by_key(new_entries)

    added = changed = deleted = 0
    touched = []
    i = j = 0
    while i < len(old_sorted) and j < len(new_sorted):
        old_entry = old_sorted[i][1]
        new_index, new_entry = new_sorted[j]
        if old_entry.key < new_entry.key:
            deleted += 1
            i += 1
        elif old_entry.key > new_entry.key:
            added += 1
            touched.append((new_index, new_entry))
            j += 1
        else:
            if old_entry.has_translation_changes(new_entry):
                changed += 1
                touched.append((new_index, new_entry))
            i += 1
            j += 1
    deleted += len(old_sorted) - i
    for new_index, new_entry in new_sorted[j:]:
        added += 1
        touched.append((new_index, new_entry))

    touched.sort(key=lambda pair: pair[0])
    stat = DiffStat(added=added, changed=changed, deleted=deleted)
    logger.debug(f"Diff: {format_diff_stat(stat) or 'no changes'}")
    return DiffResult(stat=stat, entries=[entry for _, entry in touched], header=new.header)


def format_diff_stat(stat: DiffStat) -> str:
    """Format counts as e.g. "2 new, 1 changed, 3 removed".

    Zero counts are left out; an empty string means nothing changed.
    """
    parts = []
    if stat.added:
        parts.append(f"{stat.added} new")
    if stat.changed:
        parts.append(f"{stat.changed} changed")
    if stat.deleted:
        parts.append(f"{stat.deleted} removed")
    return ", ".join(parts)
