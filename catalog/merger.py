from typing import Iterable

from utils.logging_setup import get_logger

from .entry import Catalog, Header

logger = get_logger("catalog.merger")


def merge_catalogs(catalogs: Iterable[Catalog]) -> Catalog:
    """Concatenate catalogs, keeping the first occurrence of each message.

    Entries are identified by key plus plural source. A later duplicate is
    dropped whatever its fuzzy or obsolete state. The header is taken from
    the first catalog that has a non-empty one.

    Args:
        catalogs: Source catalogs in priority order.

    Returns:
        Catalog: Surviving entries in first-seen order.
    """
    header = None
    seen = set()
    entries = []
    dropped = 0
    for catalog in catalogs:
        if header is None and not catalog.header.is_empty:
            header = catalog.header
        for entry in catalog.entries:
            if entry.dedup_key in seen:
                dropped += 1
                continue
            seen.add(entry.dedup_key)
            entries.append(entry)
    if dropped:
        logger.debug(f"Merge dropped {dropped} duplicate entries")
    return Catalog(header=header or Header(), entries=entries)
