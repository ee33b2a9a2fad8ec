import copy
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

from utils.logging_setup import get_logger

from .differ import DiffStat, diff_catalogs
from .entry import Catalog, Entry, clear_fuzzy, unset_fuzzy
from .errors import UsageError
from .merger import merge_catalogs
from .parser import parse_catalog
from .quoting import DEFAULT_WRAP_WIDTH
from .range_selector import parse_entry_range, select_range
from .serializer import DEFAULT_JSON_INDENT, OutputFormat, serialize
from .state import EntryStateFilter, filter_entries
from .stats import CatalogStats, count_stats

logger = get_logger("catalog.operations")

Buffer = Union[bytes, str]


class FuzzyAction(Enum):
    NONE = "none"
    UNSET = "unset"
    CLEAR = "clear"


def fuzzy_action_from_flags(unset: bool = False, clear: bool = False) -> FuzzyAction:
    if unset and clear:
        raise UsageError("--unset-fuzzy and --clear-fuzzy are mutually exclusive")
    if unset:
        return FuzzyAction.UNSET
    if clear:
        return FuzzyAction.CLEAR
    return FuzzyAction.NONE


def _apply_fuzzy_action(entries: List[Entry], fuzzy_action: FuzzyAction):
    if fuzzy_action == FuzzyAction.UNSET:
        unset_fuzzy(entries)
    elif fuzzy_action == FuzzyAction.CLEAR:
        clear_fuzzy(entries)


def msg_select(data: Buffer, range_expr: str = "", state_filter: Optional[EntryStateFilter] = None,
               output_format: OutputFormat = OutputFormat.PO, no_header: bool = False,
               fuzzy_action: FuzzyAction = FuzzyAction.NONE, wrap_width: int = DEFAULT_WRAP_WIDTH,
               json_indent: int = DEFAULT_JSON_INDENT, source: Optional[str] = None) -> bytes:
    """Select entries of one catalog by state and position.

    Entries are filtered first and the range numbers the filtered entries,
    so "-5" with a state filter gives the first five matching entries.

    Args:
        data: Catalog text or catalog JSON.
        range_expr: Range expression, empty for all entries.
        state_filter: State filter, None for every entry.
        output_format: Output as catalog text or JSON.
        no_header: Leave out the header.
        fuzzy_action: Unset or clear the fuzzy flag of selected entries.
        wrap_width: Line width for catalog text output.
        json_indent: Indentation for JSON output.
        source: Input name for error messages.

    Returns:
        bytes: The serialized selection. Catalog text output is empty when
            nothing is selected; JSON output then has an empty entry list.

    Raises:
        RangeSyntaxError: If the range expression is malformed (checked
            before the input is parsed).
        ParseError: If the input is malformed.
    """
    # Syntax check only, positions depend on the filtered entries
    parse_entry_range(range_expr, 0)
    catalog = parse_catalog(data, source)
    entries = filter_entries(catalog.entries, state_filter or EntryStateFilter())
    selected = [copy.deepcopy(entry) for entry in select_range(entries, range_expr)]
    logger.debug(f"Selected {len(selected)} of {len(catalog)} entries")
    if not selected and output_format == OutputFormat.PO:
        return b""
    _apply_fuzzy_action(selected, fuzzy_action)
    return serialize(catalog.with_entries(selected), output_format, no_header=no_header,
                     wrap_width=wrap_width, json_indent=json_indent)


def msg_cat(buffers: Sequence[Buffer], state_filter: Optional[EntryStateFilter] = None,
            output_format: OutputFormat = OutputFormat.PO, fuzzy_action: FuzzyAction = FuzzyAction.NONE,
            wrap_width: int = DEFAULT_WRAP_WIDTH, json_indent: int = DEFAULT_JSON_INDENT,
            sources: Optional[Sequence[str]] = None) -> bytes:
    """Concatenate catalogs, keeping the first copy of each message, then filter.

    Args:
        buffers: Catalog text or JSON inputs in priority order.
        sources: Input names for error messages, one per buffer.

    Returns:
        bytes: The serialized result.
    """
    names = list(sources) if sources else [None] * len(buffers)
    catalogs = [parse_catalog(data, name) for data, name in zip(buffers, names)]
    merged = merge_catalogs(catalogs)
    entries = [copy.deepcopy(entry) for entry in filter_entries(merged.entries, state_filter or EntryStateFilter())]
    logger.debug(f"Merged {len(catalogs)} catalogs into {len(entries)} entries")
    _apply_fuzzy_action(entries, fuzzy_action)
    return serialize(merged.with_entries(entries), output_format,
                     wrap_width=wrap_width, json_indent=json_indent)


def compare(old_data: Buffer, new_data: Buffer, no_header: bool = False,
            output_format: OutputFormat = OutputFormat.PO, wrap_width: int = DEFAULT_WRAP_WIDTH,
            json_indent: int = DEFAULT_JSON_INDENT, old_source: Optional[str] = None,
            new_source: Optional[str] = None) -> Tuple[DiffStat, bytes]:
    """Diff two catalog snapshots and build the review catalog of touched entries.

    An empty old buffer counts as an empty catalog, so every entry of the
    new catalog is reported as added.

    Returns:
        tuple: The diff counts and the serialized review catalog (new and
            changed entries under the new header; empty catalog text when
            nothing changed).
    """
    old_catalog = parse_catalog(old_data, old_source) if old_data and old_data.strip() else Catalog()
    new_catalog = parse_catalog(new_data, new_source)
    result = diff_catalogs(old_catalog, new_catalog)
    review = result.to_review_catalog()
    if not review.entries and output_format == OutputFormat.PO:
        return result.stat, b""
    return result.stat, serialize(review, output_format, no_header=no_header,
                                  wrap_width=wrap_width, json_indent=json_indent)


def stat(data: Buffer, source: Optional[str] = None) -> CatalogStats:
    return count_stats(parse_catalog(data, source))

