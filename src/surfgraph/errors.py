"""
Error types shared by the surfgraph codec, parsers and serializers.

- ParseError: malformed input, always annotated with a position
- HandleError: invalid tags or handles given to the codec
- PropertyCardinalityError: a second value for a singular property
- StateError: a single-use object reused or queried out of sequence
"""

from typing import Optional


class ParseError(ValueError):
    """Raised on malformed input; carries the line and column of the failure."""

    def __init__(self, message: str, line: int, column: int, source: Optional[str] = None):
        location = f"{line}:{column}"
        if source:
            location = f"{source}:{location}"
        super().__init__(f"{location}: {message}")
        self.message = message
        self.line = line
        self.column = column
        self.source = source


class HandleError(ValueError):
    """Raised for tags or handles that are not valid arguments to the codec."""


class PropertyCardinalityError(ValueError):
    """Raised when a value is added to a singular property that already has one."""


class StateError(RuntimeError):
    """Raised when a single-use parser, serializer or importer is misused."""
