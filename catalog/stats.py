from dataclasses import dataclass
from typing import List

from .entry import Catalog
from .state import TranslationState, classify


@dataclass
class CatalogStats:
    translated: int = 0
    untranslated: int = 0
    same: int = 0
    fuzzy: int = 0
    obsolete: int = 0

    @property
    def total(self) -> int:
        """Number of active (not obsolete) entries."""
        return self.translated + self.untranslated + self.same + self.fuzzy


def count_stats(catalog: Catalog) -> CatalogStats:
    """Count active entries by translation state, and obsolete entries apart."""
    stats = CatalogStats()
    for entry in catalog.entries:
        if entry.obsolete:
            stats.obsolete += 1
            continue
        state = classify(entry)
        if state == TranslationState.FUZZY:
            stats.fuzzy += 1
        elif state == TranslationState.UNTRANSLATED:
            stats.untranslated += 1
        elif state == TranslationState.SAME:
            stats.same += 1
        else:
            stats.translated += 1
    return stats


def _count_phrase(count: int, singular: str, plural: str) -> str:
    return f"{count} {singular if count == 1 else plural}"


def _join_parts(parts: List[str]) -> str:
    if not parts:
        return "0 translated messages."
    return ", ".join(parts) + "."


def format_stat_line(stats: CatalogStats) -> str:
    """One line report of every non-zero count, including same and obsolete entries.

    Example: "3 translated messages, 1 fuzzy translation, 1 same message."
    """
    parts = []
    if stats.translated:
        parts.append(_count_phrase(stats.translated, "translated message", "translated messages"))
    if stats.fuzzy:
        parts.append(_count_phrase(stats.fuzzy, "fuzzy translation", "fuzzy translations"))
    if stats.untranslated:
        parts.append(_count_phrase(stats.untranslated, "untranslated message", "untranslated messages"))
    if stats.same:
        parts.append(_count_phrase(stats.same, "same message", "same messages"))
    if stats.obsolete:
        parts.append(_count_phrase(stats.obsolete, "obsolete entry", "obsolete entries"))
    return _join_parts(parts)


def format_msgfmt_statistics(stats: CatalogStats) -> str:
    """Report in the form printed by `msgfmt --statistics`.

    msgfmt has no notion of "same" entries, so they count as translated.
    Obsolete entries are not reported.
    """
    translated = stats.translated + stats.same
    parts = []
    if translated:
        parts.append(_count_phrase(translated, "translated message", "translated messages"))
    if stats.fuzzy:
        parts.append(_count_phrase(stats.fuzzy, "fuzzy translation", "fuzzy translations"))
    if stats.untranslated:
        parts.append(_count_phrase(stats.untranslated, "untranslated message", "untranslated messages"))
    return _join_parts(parts)
