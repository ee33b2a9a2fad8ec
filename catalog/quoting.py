import re
from typing import List, Optional

from .errors import ParseError

DEFAULT_WRAP_WIDTH = 79

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    '"': '"',
    "\\": "\\",
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "?": "?",
    "'": "'",
}

_ESCAPE_OUT = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\v": "\\v",
}

_OCTAL_DIGITS = "01234567"
_HEX_DIGITS = "0123456789abcdefABCDEF"


def escape(s: str) -> str:
    """Escape a string for use inside a quoted catalog string.

    Backslash, double quote and the C control escapes are written the way
    gettext tools write them; any other control character becomes an octal
    escape.
    """
    out = []
    for c in s:
        if c in _ESCAPE_OUT:
            out.append(_ESCAPE_OUT[c])
        elif ord(c) < 0x20 or ord(c) == 0x7F:
            out.append("\\%03o" % ord(c))
        else:
            out.append(c)
    return "".join(out)


def parse_quoted(text: str, line: Optional[int] = None) -> str:
    """Decode one quoted string token such as `"Hello\\n"`.

    Args:
        text: The token, starting with the opening quote. Surrounding
            whitespace is allowed after the closing quote only.
        line: Line number used in error messages.

    Returns:
        str: The decoded value.

    Raises:
        ParseError: If the string is not quoted, not terminated, followed by
            other text, or contains an unknown escape sequence.
    """
    text = text.strip()
    if not text.startswith('"'):
        raise ParseError(f"expected quoted string, found {text!r}" if text else "missing quoted string", line)
    chars = []
    i = 1
    n = len(text)
    while i < n:
        c = text[i]
        if c == '"':
            rest = text[i + 1:].strip()
            if rest:
                raise ParseError(f"unexpected text after closing quote: {rest!r}", line)
            return "".join(chars)
        if c != "\\":
            chars.append(c)
            i += 1
            continue
        if i + 1 >= n:
            break
        nxt = text[i + 1]
        if nxt in _SIMPLE_ESCAPES:
            chars.append(_SIMPLE_ESCAPES[nxt])
            i += 2
        elif nxt in _OCTAL_DIGITS:
            j = i + 1
            while j < n and j < i + 4 and text[j] in _OCTAL_DIGITS:
                j += 1
            chars.append(chr(int(text[i + 1:j], 8)))
            i = j
        elif nxt == "x":
            j = i + 2
            while j < n and j < i + 4 and text[j] in _HEX_DIGITS:
                j += 1
            if j == i + 2:
                raise ParseError("\\x escape without hex digits", line)
            chars.append(chr(int(text[i + 2:j], 16)))
            i = j
        else:
            raise ParseError(f"invalid escape sequence \\{nxt}", line)
    raise ParseError("unterminated quoted string", line)


def wrap_segments(value: str, limit: int) -> List[str]:
    """Split a value into chunks for continuation lines.

    Chunks end after every newline, and longer runs are broken after spaces
    so that each escaped chunk fits in `limit` characters. A single word
    longer than the limit is kept whole. Joining the chunks gives back the
    original value.
    """
    chunks = []
    for segment in re.findall(r"[^\n]*\n|[^\n]+", value):
        if limit <= 0 or len(escape(segment)) <= limit:
            chunks.append(segment)
            continue
        current = ""
        for token in re.findall(r"[^ ]+ *| +", segment):
            if current and len(escape(current + token)) > limit:
                chunks.append(current)
                current = token
            else:
                current += token
        if current:
            chunks.append(current)
    return chunks


def format_string_field(prefix: str, keyword: str, value: str, wrap_width: int = DEFAULT_WRAP_WIDTH) -> List[str]:
    """Render `keyword "value"` as one or more catalog lines.

    Args:
        prefix: Line prefix, "" for active entries or "#~ " for obsolete ones.
        keyword: msgid, msgstr, msgstr[1], etc.
        value: Decoded string value.
        wrap_width: Maximum line width; 0 or less disables width wrapping.

    Returns:
        list: Output lines without trailing newlines.
    """
    single = f'{prefix}{keyword} "{escape(value)}"'
    has_inner_newline = "\n" in value[:-1]
    if not has_inner_newline and (wrap_width <= 0 or len(single) <= wrap_width):
        return [single]
    limit = wrap_width - len(prefix) - 2 if wrap_width > 0 else 0
    if wrap_width > 0 and limit < 1:
        limit = 1
    lines = [f'{prefix}{keyword} ""']
    for chunk in wrap_segments(value, limit):
        lines.append(f'{prefix}"{escape(chunk)}"')
    return lines
