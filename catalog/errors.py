from typing import Optional


class CatalogError(Exception):
    """Base class for errors raised by the catalog engine."""
    pass


class ParseError(CatalogError):
    """Malformed catalog text or JSON. Never partially recovered."""

    def __init__(self, reason: str, line: Optional[int] = None, source: Optional[str] = None):
        self.reason = reason
        self.line = line
        self.source = source
        super().__init__(self._format())

    def _format(self) -> str:
        location = self.source or ""
        if self.line is not None:
            location = f"{location}:{self.line}" if location else f"line {self.line}"
        if location:
            return f"{location}: {self.reason}"
        return self.reason

    def with_source(self, source: str) -> 'ParseError':
        """Return a copy of this error attributed to the given source name."""
        return ParseError(self.reason, line=self.line, source=source)


class RangeSyntaxError(CatalogError):
    """Invalid entry range expression (non-numeric token, inverted bounds)."""
    pass


class UsageError(CatalogError):
    """Contradictory filter or state options."""
    pass
