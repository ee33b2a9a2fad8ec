import codecs
import json
import re
from enum import Enum
from typing import Dict, List

from utils.logging_setup import get_logger

from .entry import Catalog, Entry, Header
from .errors import CatalogError
from .quoting import DEFAULT_WRAP_WIDTH, escape, format_string_field

logger = get_logger("catalog.serializer")

DEFAULT_JSON_INDENT = 2
OBSOLETE_PREFIX = "#~ "

_CHARSET_RE = re.compile(r"charset=([A-Za-z0-9_.:\-]+)")
_HEADER_LINE_RE = re.compile(r"[^\n]*\n|[^\n]+$")


class OutputFormat(Enum):
    PO = "po"
    JSON = "json"


def _output_encoding(header: Header) -> str:
    match = _CHARSET_RE.search(header.get("Content-Type", ""))
    if match:
        try:
            return codecs.lookup(match.group(1)).name
        except LookupError:
            pass
    return "utf-8"


def _header_lines(header: Header) -> List[str]:
    lines = list(header.comments)
    lines.append('msgid ""')
    lines.append('msgstr ""')
    for line in _HEADER_LINE_RE.findall(header.to_msgstr()):
        lines.append(f'"{escape(line)}"')
    return lines


def _entry_lines(entry: Entry, wrap_width: int) -> List[str]:
    lines = []
    previous_marker = "#~|" if entry.obsolete else "#|"
    for line in entry.previous:
        lines.append(f"{previous_marker} {line}")
    for comment in entry.translator_comments:
        lines.append(f"# {comment}" if comment else "#")
    for comment in entry.extracted_comments:
        lines.append(f"#. {comment}" if comment else "#.")
    for reference in entry.references:
        lines.append(f"#: {reference}")
    if entry.flags:
        lines.append("#, " + ", ".join(entry.flags))

    prefix = OBSOLETE_PREFIX if entry.obsolete else ""
    if entry.msgctxt is not None:
        lines.extend(format_string_field(prefix, "msgctxt", entry.msgctxt, wrap_width))
    lines.extend(format_string_field(prefix, "msgid", entry.msgid, wrap_width))
    if entry.is_plural:
        lines.extend(format_string_field(prefix, "msgid_plural", entry.msgid_plural, wrap_width))
        plural_forms = entry.msgstr_plural or ["", ""]
        for index, text in enumerate(plural_forms):
            lines.extend(format_string_field(prefix, f"msgstr[{index}]", text, wrap_width))
    else:
        lines.extend(format_string_field(prefix, "msgstr", entry.msgstr, wrap_width))
    return lines


def _reads_as_header(entry: Entry) -> bool:
    return entry.msgid == "" and entry.msgctxt is None and not entry.is_plural and not entry.obsolete


def serialize_po(catalog: Catalog, no_header: bool = False, wrap_width: int = DEFAULT_WRAP_WIDTH) -> bytes:
    """Write a catalog as gettext catalog text.

    Args:
        catalog: The catalog to write.
        no_header: Leave out the header entry.
        wrap_width: Maximum line width for quoted strings, 0 to only break
            after embedded newlines.

    Returns:
        bytes: Catalog text in the charset declared by the header (UTF-8
            when none is declared). Empty when there is nothing to write.
    """
    blocks = []
    if not no_header and not catalog.header.is_empty:
        blocks.append(_header_lines(catalog.header))
    elif catalog.entries and _reads_as_header(catalog.entries[0]):
        # Without a header block in front the first msgid "" entry would be
        # read back as the header
        blocks.append(_header_lines(Header()))
    for entry in catalog.entries:
        blocks.append(_entry_lines(entry, wrap_width))
    if not blocks:
        return b""
    text = "\n\n".join("\n".join(block) for block in blocks) + "\n"
    encoding = _output_encoding(catalog.header)
    try:
        return text.encode(encoding)
    except UnicodeEncodeError as e:
        raise CatalogError(f"cannot encode catalog as {encoding}: {e.reason}")


def entry_to_json(entry: Entry) -> Dict:
    data = {"key": entry.msgid}
    if entry.msgctxt is not None:
        data["context"] = entry.msgctxt
    if entry.is_plural:
        data["plural_source"] = entry.msgid_plural
    data["text"] = entry.msgstr
    if entry.is_plural:
        data["plural_texts"] = list(entry.msgstr_plural)
    data["flags"] = list(entry.flags)
    data["comments"] = {
        "translator": list(entry.translator_comments),
        "extracted": list(entry.extracted_comments),
        "reference": list(entry.references),
        "previous": list(entry.previous),
    }
    data["obsolete"] = entry.obsolete
    return data


def catalog_to_json(catalog: Catalog, no_header: bool = False) -> Dict:
    header = Header() if no_header else catalog.header
    return {
        "header_comment": "".join(f"{line}\n" for line in header.comments),
        "header_meta": dict(header.metadata),
        "entries": [entry_to_json(entry) for entry in catalog.entries],
    }


def serialize_json(catalog: Catalog, no_header: bool = False, indent: int = DEFAULT_JSON_INDENT) -> bytes:
    """Write a catalog in the catalog JSON schema.

    Non-ASCII text is written as is; the output is UTF-8 and ends with a newline.
    """
    text = json.dumps(catalog_to_json(catalog, no_header), ensure_ascii=False, indent=indent)
    return (text + "\n").encode("utf-8")


def serialize(catalog: Catalog, output_format: OutputFormat = OutputFormat.PO, no_header: bool = False,
              wrap_width: int = DEFAULT_WRAP_WIDTH, json_indent: int = DEFAULT_JSON_INDENT) -> bytes:
    if output_format == OutputFormat.JSON:
        data = serialize_json(catalog, no_header=no_header, indent=json_indent)
    else:
        data = serialize_po(catalog, no_header=no_header, wrap_width=wrap_width)
    logger.debug(f"Serialized {len(catalog)} entries as {output_format.value} ({len(data)} bytes)")
    return data
