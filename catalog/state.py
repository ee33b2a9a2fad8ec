from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List

from .entry import Entry
from .errors import UsageError


class TranslationState(Enum):
    FUZZY = "fuzzy"
    UNTRANSLATED = "untranslated"
    SAME = "same"
    TRANSLATED = "translated"


def classify(entry: Entry) -> TranslationState:
    """Get the translation state of an entry.

    Obsolete entries are classified the same way; obsolescence is checked
    separately by the filter.
    """
    if entry.fuzzy:
        return TranslationState.FUZZY
    if all(text == "" for text in entry.translations()):
        return TranslationState.UNTRANSLATED
    if entry.main_translation() == entry.msgid:
        return TranslationState.SAME
    return TranslationState.TRANSLATED


@dataclass(frozen=True)
class EntryStateFilter:
    """Entry selection by translation state.

    `translated`, `untranslated` and `fuzzy` are OR-combined; with none of
    them set every state matches. `only_same` and `only_obsolete` replace
    the OR group and cannot be combined with it or with each other.
    """
    translated: bool = False
    untranslated: bool = False
    fuzzy: bool = False
    with_obsolete: bool = True
    no_obsolete: bool = False
    only_same: bool = False
    only_obsolete: bool = False

    def __post_init__(self):
        if self.only_same and self.only_obsolete:
            raise UsageError("--only-same and --only-obsolete cannot be used together")
        if (self.only_same or self.only_obsolete) and self.has_state_flags:
            override = "--only-same" if self.only_same else "--only-obsolete"
            raise UsageError(f"{override} cannot be combined with --translated, --untranslated or --fuzzy")

    @property
    def has_state_flags(self) -> bool:
        return self.translated or self.untranslated or self.fuzzy

    @property
    def include_obsolete(self) -> bool:
        return self.with_obsolete and not self.no_obsolete

    def matches(self, entry: Entry) -> bool:
        if self.only_same:
            return not entry.obsolete and classify(entry) == TranslationState.SAME
        if self.only_obsolete:
            return entry.obsolete
        if entry.obsolete and not self.include_obsolete:
            return False
        if not self.has_state_flags:
            return True
        state = classify(entry)
        if self.translated and state in (TranslationState.TRANSLATED, TranslationState.SAME):
            return True
        if self.untranslated and state == TranslationState.UNTRANSLATED:
            return True
        return self.fuzzy and state == TranslationState.FUZZY


def filter_entries(entries: Iterable[Entry], state_filter: EntryStateFilter) -> List[Entry]:
    return [entry for entry in entries if state_filter.matches(entry)]
