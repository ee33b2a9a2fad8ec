import re
from typing import List, Union

import polib

from utils.logging_setup import get_logger

from .entry import FUZZY_FLAG, Catalog, Entry, Header
from .errors import ParseError
from .parser import detect_encoding, parse_previous
from .quoting import DEFAULT_WRAP_WIDTH, escape

logger = get_logger("catalog.compat")

_LINE_NUMBER_RE = re.compile(r"[0-9]+")


def _split_reference(token: str):
    path, sep, line = token.rpartition(":")
    if sep and path and _LINE_NUMBER_RE.fullmatch(line):
        return (path, line)
    return (token, "")


def _header_to_polib(header: Header, pofile: polib.POFile):
    text_lines = []
    for line in header.comments:
        if line.startswith("#,"):
            flags = [flag.strip() for flag in line[2:].split(",")]
            pofile.metadata_is_fuzzy = FUZZY_FLAG in flags
            continue
        if line.startswith("# "):
            text_lines.append(line[2:])
        else:
            text_lines.append(line[1:] if line.startswith("#") else line)
    pofile.header = "\n".join(text_lines)
    for key, value in header.metadata.items():
        pofile.metadata[key] = value


def _entry_to_polib(entry: Entry) -> polib.POEntry:
    previous = parse_previous(entry.previous)
    occurrences = [_split_reference(token) for line in entry.references for token in line.split()]
    kwargs = dict(
        msgid=entry.msgid,
        msgctxt=entry.msgctxt,
        flags=list(entry.flags),
        comment="\n".join(entry.extracted_comments),
        tcomment="\n".join(entry.translator_comments),
        occurrences=occurrences,
        obsolete=entry.obsolete,
        previous_msgctxt=previous.get("msgctxt"),
        previous_msgid=previous.get("msgid"),
        previous_msgid_plural=previous.get("msgid_plural"),
    )
    if entry.is_plural:
        kwargs["msgid_plural"] = entry.msgid_plural
        kwargs["msgstr_plural"] = {i: text for i, text in enumerate(entry.msgstr_plural)}
    else:
        kwargs["msgstr"] = entry.msgstr
    return polib.POEntry(**kwargs)


def to_polib(catalog: Catalog, wrap_width: int = DEFAULT_WRAP_WIDTH) -> polib.POFile:
    """Build a polib POFile holding the same header and entries."""
    pofile = polib.POFile(wrapwidth=wrap_width)
    _header_to_polib(catalog.header, pofile)
    for entry in catalog.entries:
        pofile.append(_entry_to_polib(entry))
    return pofile


def _previous_lines(poentry: polib.POEntry) -> List[str]:
    lines = []
    for keyword in ("msgctxt", "msgid", "msgid_plural"):
        value = getattr(poentry, f"previous_{keyword}", None)
        if value is not None:
            lines.append(f'{keyword} "{escape(value)}"')
    return lines


def _entry_from_polib(poentry: polib.POEntry, position: int) -> Entry:
    if poentry.msgid_plural:
        msgstr_plural = [poentry.msgstr_plural[i] for i in sorted(poentry.msgstr_plural)]
        msgid_plural = poentry.msgid_plural
    else:
        msgstr_plural = []
        msgid_plural = None
    references = []
    if poentry.occurrences:
        references.append(" ".join(f"{path}:{line}" if line else path for path, line in poentry.occurrences))
    flags = []
    for flag in poentry.flags:
        if flag not in flags:
            flags.append(flag)
    return Entry(
        msgid=poentry.msgid,
        msgstr="" if msgid_plural is not None else poentry.msgstr,
        msgctxt=poentry.msgctxt,
        msgid_plural=msgid_plural,
        msgstr_plural=msgstr_plural,
        flags=flags,
        translator_comments=poentry.tcomment.split("\n") if poentry.tcomment else [],
        extracted_comments=poentry.comment.split("\n") if poentry.comment else [],
        references=references,
        previous=_previous_lines(poentry),
        obsolete=bool(poentry.obsolete),
        position=position,
    )


def from_polib(pofile: polib.POFile) -> Catalog:
    """Convert a polib POFile into a Catalog.

    polib keeps reference lines as (path, line) pairs, so all references of
    an entry come back on a single line.
    """
    comments = [f"# {line}" if line else "#" for line in pofile.header.split("\n")] if pofile.header else []
    if pofile.metadata_is_fuzzy:
        comments.append(f"#, {FUZZY_FLAG}")
    header = Header(comments=comments, metadata=dict(pofile.metadata))
    entries = [_entry_from_polib(poentry, i) for i, poentry in enumerate(pofile, start=1)]
    return Catalog(header=header, entries=entries)


def check_syntax(data: Union[bytes, str]) -> polib.POFile:
    """Parse catalog text with polib to confirm other gettext tools accept it.

    Raises:
        ParseError: If polib rejects the text.
    """
    if isinstance(data, bytes):
        encoding = detect_encoding(data)
        try:
            text = data.decode(encoding).lstrip("\ufeff")
        except UnicodeDecodeError as e:
            raise ParseError(f"cannot decode input as {encoding}: {e.reason}")
    else:
        text = data.lstrip("\ufeff")
    try:
        pofile = polib.pofile(text, encoding="utf-8")
    except (OSError, ValueError) as e:
        raise ParseError(f"syntax check failed: {e}")
    logger.debug(f"Syntax check passed for {len(pofile)} entries")
    return pofile


def compile_mo(catalog: Catalog) -> bytes:
    """Compile a catalog into a binary MO image.

    Like msgfmt, fuzzy, untranslated and obsolete entries are left out.
    """
    return to_polib(catalog).to_binary()
