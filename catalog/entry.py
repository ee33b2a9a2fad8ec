import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

FUZZY_FLAG = "fuzzy"

# gettext joins context and msgid with EOT in compiled catalogs
CONTEXT_SEPARATOR = "\x04"


@dataclass
class Header:
    """Metadata record of a catalog (the msgid "" pseudo-entry).

    Kept apart from the entry sequence so that entry positions always
    start at 1 and filtering or range selection never has to skip it.
    """
    comments: List[str] = field(default_factory=list)
    metadata: Dict[str, str] = field(default_factory=dict)
    # msgstr text as read, kept so repeated keys and lines without a colon
    # are written back as they were
    raw_msgstr: Optional[str] = field(default=None, compare=False, repr=False)

    @property
    def is_empty(self) -> bool:
        return not self.comments and not self.metadata

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self.metadata.get(key, default)

    @property
    def plural_forms(self) -> Optional[str]:
        return self.metadata.get("Plural-Forms")

    @property
    def nplurals(self) -> Optional[int]:
        """Number of plural forms declared by the Plural-Forms field, if any."""
        plural_forms = self.plural_forms
        if not plural_forms:
            return None
        match = re.search(r"nplurals\s*=\s*(\d+)", plural_forms)
        return int(match.group(1)) if match else None

    def to_msgstr(self) -> str:
        """Render the header msgstr text.

        The text as read is returned while the metadata still matches it, so
        an unmodified header is written back byte for byte.
        """
        if self.raw_msgstr is not None and Header.from_msgstr(self.raw_msgstr).metadata == self.metadata:
            return self.raw_msgstr
        return "".join(f"{key}: {value}\n" for key, value in self.metadata.items())

    @classmethod
    def from_msgstr(cls, msgstr: str, comments: Optional[List[str]] = None) -> 'Header':
        metadata = {}
        for line in msgstr.split("\n"):
            if line.strip() == "":
                continue
            key, _, value = line.partition(":")
            metadata[key.strip()] = value.strip()
        return cls(comments=list(comments or []), metadata=metadata, raw_msgstr=msgstr)


@dataclass
class Entry:
    """One translation unit of a catalog.

    Text fields hold decoded strings. Comment lists hold the comment text
    without its marker (`#`, `#.`, `#:` or `#|`).
    """
    msgid: str
    msgstr: str = ""
    msgctxt: Optional[str] = None
    msgid_plural: Optional[str] = None
    msgstr_plural: List[str] = field(default_factory=list)
    flags: List[str] = field(default_factory=list)
    translator_comments: List[str] = field(default_factory=list)
    extracted_comments: List[str] = field(default_factory=list)
    references: List[str] = field(default_factory=list)
    previous: List[str] = field(default_factory=list)
    obsolete: bool = False
    position: Optional[int] = field(default=None, compare=False)

    @property
    def key(self) -> str:
        if self.msgctxt is not None:
            return self.msgctxt + CONTEXT_SEPARATOR + self.msgid
        return self.msgid

    @property
    def dedup_key(self):
        return (self.key, self.msgid_plural or "")

    @property
    def is_plural(self) -> bool:
        return self.msgid_plural is not None

    @property
    def fuzzy(self) -> bool:
        return FUZZY_FLAG in self.flags

    def translations(self) -> List[str]:
        """All translated strings of the entry (every plural form for plurals)."""
        if self.is_plural:
            return list(self.msgstr_plural)
        return [self.msgstr]

    def main_translation(self) -> str:
        if self.is_plural:
            return self.msgstr_plural[0] if self.msgstr_plural else ""
        return self.msgstr

    def has_translation_changes(self, other: 'Entry') -> bool:
        """Check whether the translatable content differs from another entry.

        Only the fuzzy flag, key, translated text, plural source and plural
        forms are compared; comments, other flags and positions are ignored.
        """
        return (self.fuzzy != other.fuzzy
                or self.key != other.key
                or self.msgstr != other.msgstr
                or (self.msgid_plural or "") != (other.msgid_plural or "")
                or self.msgstr_plural != other.msgstr_plural)

    def unset_fuzzy(self):
        """Remove the fuzzy flag, keeping the translated text."""
        self.flags = [f for f in self.flags if f != FUZZY_FLAG]

    def clear_fuzzy(self):
        """Remove the fuzzy flag and empty the translation of a fuzzy entry.

        msgid and msgid_plural are kept, and the number of plural forms is
        preserved. Entries that are not fuzzy are left untouched.
        """
        if not self.fuzzy:
            return
        self.unset_fuzzy()
        self.msgstr = ""
        self.msgstr_plural = ["" for _ in self.msgstr_plural]


@dataclass
class Catalog:
    """A parsed catalog: header plus ordered content entries."""
    header: Header = field(default_factory=Header)
    entries: List[Entry] = field(default_factory=list)

    def __len__(self):
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def find(self, msgid: str, msgctxt: Optional[str] = None) -> Optional[Entry]:
        """Return the first entry with the given msgid and context, or None."""
        for entry in self.entries:
            if entry.msgid == msgid and entry.msgctxt == msgctxt:
                return entry
        return None

    def active_entries(self) -> List[Entry]:
        return [e for e in self.entries if not e.obsolete]

    def with_entries(self, entries: List[Entry]) -> 'Catalog':
        """A catalog sharing this header with a different entry sequence."""
        return Catalog(header=self.header, entries=list(entries))


def unset_fuzzy(entries: List[Entry]):
    for entry in entries:
        entry.unset_fuzzy()


def clear_fuzzy(entries: List[Entry]):
    for entry in entries:
        entry.clear_fuzzy()
