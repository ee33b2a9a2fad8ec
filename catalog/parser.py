import codecs
import json
import re
from typing import Dict, List, Optional, Union

from utils.logging_setup import get_logger

from .entry import Catalog, Entry, Header
from .errors import ParseError
from .quoting import parse_quoted

logger = get_logger("catalog.parser")

BOM = b"\xef\xbb\xbf"

_CHARSET_RE = re.compile(rb"charset=([A-Za-z0-9_.:\-]+)")
_PLURAL_INDEX_RE = re.compile(r"[0-9]+")
_KEYWORDS = ("msgid_plural", "msgctxt", "msgid", "msgstr")
_PREVIOUS_KEYWORDS = ("msgid_plural", "msgctxt", "msgid")


def parse_catalog(data: Union[bytes, str], source: Optional[str] = None) -> Catalog:
    """Parse a catalog from catalog text or catalog JSON.

    The format is detected from content: a first non-whitespace character
    of "{" means JSON, anything else is catalog text.

    Args:
        data: Raw file content.
        source: Name used in error messages (usually a file path).

    Returns:
        Catalog: The parsed header and entries, duplicates preserved.

    Raises:
        ParseError: If the input is malformed. No partial result is returned.
    """
    if isinstance(data, bytes):
        if data.startswith(BOM):
            data = data[len(BOM):]
        if data.lstrip()[:1] == b"{":
            text = _decode(data, "utf-8", source)
            return parse_catalog_json(text, source)
        text = _decode(data, detect_encoding(data), source)
    else:
        text = data.lstrip("\ufeff")
        if text.lstrip()[:1] == "{":
            return parse_catalog_json(text, source)
    return parse_catalog_text(text, source)


def is_json_content(data: Union[bytes, str]) -> bool:
    if isinstance(data, bytes):
        if data.startswith(BOM):
            data = data[len(BOM):]
        return data.lstrip()[:1] == b"{"
    return data.lstrip("\ufeff").lstrip()[:1] == "{"


def detect_encoding(data: bytes) -> str:
    match = _CHARSET_RE.search(data)
    if match:
        charset = match.group(1).decode("ascii")
        try:
            return codecs.lookup(charset).name
        except LookupError:
            # "CHARSET" placeholder of fresh templates, or an unknown name
            logger.debug(f"Unknown charset {charset!r}, decoding as UTF-8")
    return "utf-8"


def _decode(data: bytes, encoding: str, source: Optional[str]) -> str:
    try:
        return data.decode(encoding)
    except UnicodeDecodeError as e:
        raise ParseError(f"cannot decode input as {encoding}: {e.reason} at byte {e.start}", source=source)


class _PendingEntry:
    """Fields collected for the entry currently being read."""

    def __init__(self):
        self.raw_comments: List[str] = []
        self.translator_comments: List[str] = []
        self.extracted_comments: List[str] = []
        self.references: List[str] = []
        self.previous: List[str] = []
        self.flags: List[str] = []
        self.values: Dict[str, str] = {}
        self.plural_forms: List[str] = []
        self.obsolete: Optional[bool] = None
        self.start_line: Optional[int] = None

    @property
    def has_translation(self) -> bool:
        return "msgstr" in self.values or bool(self.plural_forms)

    @property
    def is_empty(self) -> bool:
        return not self.raw_comments and not self.values


class _CatalogTextParser:
    """Line based parser for gettext catalog text."""

    def __init__(self, text: str, source: Optional[str] = None):
        self.text = text
        self.source = source
        self.header: Optional[Header] = None
        self.entries: List[Entry] = []
        self.pending = _PendingEntry()
        self.current_field = None
        self.line_no = 0

    def error(self, reason: str, line: Optional[int] = None) -> ParseError:
        return ParseError(reason, line=line if line is not None else self.line_no, source=self.source)

    def parse(self) -> Catalog:
        try:
            for self.line_no, line in enumerate(self.text.split("\n"), start=1):
                self._parse_line(line)
            self._finish_entry(at_eof=True)
        except ParseError as e:
            if self.source and e.source is None:
                raise e.with_source(self.source) from None
            raise
        logger.debug(f"Parsed {len(self.entries)} entries from {self.source or 'catalog text'}")
        return Catalog(header=self.header or Header(), entries=self.entries)

    def _parse_line(self, line: str):
        stripped = line.strip()
        if stripped == "":
            if self.pending.has_translation:
                self._finish_entry()
            self.current_field = None
            return
        if stripped.startswith("#~"):
            rest = stripped[2:]
            if rest.startswith("|"):
                self._add_comment(line, "#|" + rest[1:])
                return
            body = rest.strip()
            if body == "":
                return
            if body.startswith("#"):
                raise self.error(f"comment inside obsolete entry: {stripped!r}")
            self._parse_statement(body, obsolete=True)
            return
        if stripped.startswith("#"):
            self._add_comment(line, stripped)
            return
        self._parse_statement(stripped, obsolete=False)

    def _add_comment(self, line: str, stripped: str):
        if self.pending.has_translation:
            self._finish_entry()
        elif "msgid" in self.pending.values:
            raise self.error("missing msgstr before comment")
        pending = self.pending
        if pending.start_line is None:
            pending.start_line = self.line_no
        pending.raw_comments.append(line.rstrip())
        self.current_field = None
        marker = stripped[:2]
        if marker == "#,":
            for flag in stripped[2:].split(","):
                flag = flag.strip()
                if flag and flag not in pending.flags:
                    pending.flags.append(flag)
        elif marker == "#.":
            pending.extracted_comments.append(_comment_text(stripped[2:]))
        elif marker == "#:":
            pending.references.append(stripped[2:].strip())
        elif marker == "#|":
            pending.previous.append(stripped[2:].strip())
        else:
            pending.translator_comments.append(_comment_text(stripped[1:]))

    def _parse_statement(self, text: str, obsolete: bool):
        if text.startswith('"'):
            self._parse_continuation(text, obsolete)
            return
        keyword, index, rest = _split_keyword(text, self.line_no, self.source)
        if keyword is None:
            raise self.error(f"unrecognized line: {text!r}")
        value = parse_quoted(rest, self.line_no) if rest else None
        if value is None:
            raise self.error(f"missing quoted string after {keyword}")
        if keyword in ("msgctxt", "msgid") and self.pending.has_translation:
            self._finish_entry()
        pending = self.pending
        if pending.obsolete is None:
            pending.obsolete = obsolete
        elif pending.obsolete != obsolete:
            raise self.error("mixed obsolete and active lines in one entry")
        if pending.start_line is None:
            pending.start_line = self.line_no

        if keyword == "msgctxt":
            if "msgctxt" in pending.values or "msgid" in pending.values:
                raise self.error("unexpected msgctxt")
            pending.values["msgctxt"] = value
            self.current_field = ("msgctxt", None)
        elif keyword == "msgid":
            if "msgid" in pending.values:
                raise self.error("missing msgstr before msgid")
            pending.values["msgid"] = value
            self.current_field = ("msgid", None)
        elif keyword == "msgid_plural":
            if "msgid" not in pending.values or "msgid_plural" in pending.values or pending.has_translation:
                raise self.error("unexpected msgid_plural")
            pending.values["msgid_plural"] = value
            self.current_field = ("msgid_plural", None)
        elif index is None:
            if "msgid" not in pending.values or pending.has_translation:
                raise self.error("unexpected msgstr")
            if "msgid_plural" in pending.values:
                raise self.error("plural entry requires indexed msgstr[N]")
            pending.values["msgstr"] = value
            self.current_field = ("msgstr", None)
        else:
            if "msgid_plural" not in pending.values:
                raise self.error(f"msgstr[{index}] without msgid_plural")
            if index != len(pending.plural_forms):
                raise self.error(f"plural index {index} out of sequence, expected {len(pending.plural_forms)}")
            pending.plural_forms.append(value)
            self.current_field = ("msgstr", index)

    def _parse_continuation(self, text: str, obsolete: bool):
        if self.current_field is None:
            raise self.error("string continuation without a keyword")
        if self.pending.obsolete != obsolete:
            raise self.error("mixed obsolete and active lines in one entry")
        value = parse_quoted(text, self.line_no)
        name, index = self.current_field
        if index is None:
            self.pending.values[name] += value
        else:
            self.pending.plural_forms[index] += value

    def _finish_entry(self, at_eof: bool = False):
        pending = self.pending
        self.pending = _PendingEntry()
        self.current_field = None
        if pending.is_empty:
            return
        if "msgid" not in pending.values:
            if at_eof and not pending.values:
                logger.debug(f"Dropping {len(pending.raw_comments)} trailing comment lines")
                return
            raise self.error("entry without msgid", pending.start_line)
        if not pending.has_translation:
            raise self.error("missing msgstr", pending.start_line)

        values = pending.values
        if (self.header is None and not self.entries and values["msgid"] == ""
                and "msgctxt" not in values and "msgid_plural" not in values
                and not pending.obsolete):
            self.header = Header.from_msgstr(values.get("msgstr", ""), comments=pending.raw_comments)
            return

        self.entries.append(Entry(
            msgid=values["msgid"],
            msgstr=values.get("msgstr", ""),
            msgctxt=values.get("msgctxt"),
            msgid_plural=values.get("msgid_plural"),
            msgstr_plural=pending.plural_forms,
            flags=pending.flags,
            translator_comments=pending.translator_comments,
            extracted_comments=pending.extracted_comments,
            references=pending.references,
            previous=pending.previous,
            obsolete=bool(pending.obsolete),
            position=len(self.entries) + 1,
        ))


def _comment_text(text: str) -> str:
    text = text.rstrip()
    return text[1:] if text.startswith(" ") else text


def _split_keyword(text: str, line: Optional[int] = None, source: Optional[str] = None):
    """Split a statement into (keyword, plural index, rest of line)."""
    for keyword in _KEYWORDS:
        if not text.startswith(keyword):
            continue
        rest = text[len(keyword):]
        index = None
        if keyword == "msgstr" and rest.startswith("["):
            close = rest.find("]")
            raw_index = rest[1:close] if close != -1 else rest[1:]
            if close == -1 or not _PLURAL_INDEX_RE.fullmatch(raw_index):
                raise ParseError(f"malformed plural index: {text.split()[0]!r}", line=line, source=source)
            index = int(raw_index)
            rest = rest[close + 1:]
        if rest and not (rest[0].isspace() or rest[0] == '"'):
            continue
        return keyword, index, rest.strip()
    return None, None, None


def parse_catalog_text(text: str, source: Optional[str] = None) -> Catalog:
    return _CatalogTextParser(text, source).parse()


def parse_previous(lines: List[str]) -> Dict[str, str]:
    """Decode previous-value comment lines into their fields.

    Args:
        lines: Entry.previous lines, e.g. ['msgid ""', '"Old text"'].

    Returns:
        dict: Mapping of msgctxt/msgid/msgid_plural to the decoded value.
    """
    values = {}
    current = None
    for line in lines:
        if line.startswith('"'):
            if current is None:
                raise ParseError(f"previous-value continuation without a keyword: {line!r}")
            values[current] += parse_quoted(line)
            continue
        for keyword in _PREVIOUS_KEYWORDS:
            if line.startswith(keyword) and line[len(keyword):len(keyword) + 1] in (" ", '"', "\t"):
                current = keyword
                values[current] = parse_quoted(line[len(keyword):])
                break
        else:
            raise ParseError(f"unrecognized previous-value line: {line!r}")
    return values


# JSON


def parse_catalog_json(text: str, source: Optional[str] = None) -> Catalog:
    """Parse the catalog JSON schema into a Catalog.

    Raises:
        ParseError: If the text is not valid JSON or does not match the schema.
    """
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"invalid JSON: {e.msg} (column {e.colno})", line=e.lineno, source=source)
    if not isinstance(payload, dict):
        raise ParseError("catalog JSON must be an object", source=source)

    try:
        header = _header_from_json(payload)
        raw_entries = payload.get("entries", [])
        if raw_entries is None:
            raw_entries = []
        if not isinstance(raw_entries, list):
            raise ParseError("'entries' must be a list")
        entries = [_entry_from_json(item, i, header) for i, item in enumerate(raw_entries, start=1)]
    except ParseError as e:
        raise e.with_source(source) if source else e

    logger.debug(f"Parsed {len(entries)} entries from {source or 'catalog JSON'}")
    return Catalog(header=header, entries=entries)


def _header_from_json(payload: dict) -> Header:
    header_comment = payload.get("header_comment") or ""
    if not isinstance(header_comment, str):
        raise ParseError("'header_comment' must be a string")
    comments = header_comment[:-1].split("\n") if header_comment.endswith("\n") else header_comment.split("\n")
    comments = comments if header_comment else []

    header_meta = payload.get("header_meta") or {}
    if isinstance(header_meta, str):
        return Header.from_msgstr(header_meta, comments=comments)
    if not isinstance(header_meta, dict):
        raise ParseError("'header_meta' must be an object")
    metadata = {}
    for key, value in header_meta.items():
        if not isinstance(value, str):
            raise ParseError(f"header_meta value for {key!r} must be a string")
        metadata[key] = value
    return Header(comments=comments, metadata=metadata)


def _entry_from_json(item, index: int, header: Header) -> Entry:
    if not isinstance(item, dict):
        raise ParseError(f"entry {index}: must be an object")

    def string_field(name, default=None, required=False):
        if name not in item or item[name] is None:
            if required:
                raise ParseError(f"entry {index}: missing '{name}'")
            return default
        value = item[name]
        if not isinstance(value, str):
            raise ParseError(f"entry {index}: '{name}' must be a string")
        return value

    def string_list(container, name, label):
        value = container.get(name)
        if value is None:
            return []
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ParseError(f"entry {index}: '{label}' must be a list of strings")
        return list(value)

    key = string_field("key", required=True)
    context = string_field("context")
    plural_source = string_field("plural_source")
    text = string_field("text", default="")
    plural_texts = string_list(item, "plural_texts", "plural_texts")
    if plural_texts and plural_source is None:
        raise ParseError(f"entry {index}: 'plural_texts' without 'plural_source'")
    if plural_source is not None and not plural_texts:
        plural_texts = [""] * (header.nplurals or 2)

    flags = []
    for flag in string_list(item, "flags", "flags"):
        if flag not in flags:
            flags.append(flag)
    fuzzy = item.get("fuzzy", False)
    if not isinstance(fuzzy, bool):
        raise ParseError(f"entry {index}: 'fuzzy' must be a boolean")
    if fuzzy and "fuzzy" not in flags:
        flags.insert(0, "fuzzy")

    comments = item.get("comments") or {}
    if not isinstance(comments, dict):
        raise ParseError(f"entry {index}: 'comments' must be an object")
    obsolete = item.get("obsolete", False)
    if not isinstance(obsolete, bool):
        raise ParseError(f"entry {index}: 'obsolete' must be a boolean")

    return Entry(
        msgid=key,
        msgstr="" if plural_source is not None else text,
        msgctxt=context,
        msgid_plural=plural_source,
        msgstr_plural=plural_texts,
        flags=flags,
        translator_comments=string_list(comments, "translator", "comments.translator"),
        extracted_comments=string_list(comments, "extracted", "comments.extracted"),
        references=string_list(comments, "reference", "comments.reference"),
        previous=string_list(comments, "previous", "comments.previous"),
        obsolete=obsolete,
        position=index,
    )
