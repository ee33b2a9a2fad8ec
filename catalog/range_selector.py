import re
from typing import List, Sequence, TypeVar

from .errors import RangeSyntaxError

T = TypeVar("T")

_NUMBER_RE = re.compile(r"[0-9]+")


def _parse_number(text: str, token: str) -> int:
    if not _NUMBER_RE.fullmatch(text):
        raise RangeSyntaxError(f"invalid range token {token!r}")
    return int(text)


def parse_entry_range(expr: str, max_entry: int) -> List[int]:
    """Parse a range expression such as "3,5,9-13" into entry positions.

    Tokens are separated by commas and may be a single position `N`, a
    closed range `A-B`, a prefix `-N` (1 to N) or a suffix `N-` (N to the
    last entry). An empty expression selects every position.

    Args:
        expr: The range expression.
        max_entry: Number of entries available. Positions outside
            1..max_entry are dropped without error.

    Returns:
        list: Ascending 1-based positions without duplicates.

    Raises:
        RangeSyntaxError: On a non-numeric token, a bare "-" or A > B.
    """
    if expr is None or expr.strip() == "":
        return list(range(1, max_entry + 1))

    positions = set()
    for raw_token in expr.split(","):
        token = raw_token.strip()
        if token == "":
            continue
        if "-" not in token:
            start = end = _parse_number(token, token)
        else:
            low, _, high = token.partition("-")
            low, high = low.strip(), high.strip()
            if low == "" and high == "":
                raise RangeSyntaxError(f"range {token!r} has no bounds")
            start = _parse_number(low, token) if low else 1
            end = _parse_number(high, token) if high else max_entry
            if low and high and start > end:
                raise RangeSyntaxError(f"invalid range {token!r}: start is greater than end")
        start = max(start, 1)
        end = min(end, max_entry)
        positions.update(range(start, end + 1))
    return sorted(positions)


def select_range(entries: Sequence[T], expr: str) -> List[T]:
    """Pick entries by 1-based position, in the order of the sequence."""
    return [entries[position - 1] for position in parse_entry_range(expr, len(entries))]
