"""
surfgraph: URF resource graphs and the SURF text notation.

Parse SURF documents and CSV files into graphs of tagged resources, and
serialize graphs back to SURF.
"""

__version__ = "0.1.0"

from surfgraph.errors import HandleError, ParseError, PropertyCardinalityError, StateError
from surfgraph.config import ConfigValidationError, SurfConfig
from surfgraph.graph import Resource, ResourceDescription, SimpleGraphProcessor, UrfProcessor
from surfgraph.model import (
    Character,
    EmailAddress,
    Iri,
    MonthDay,
    TelephoneNumber,
    ValueKind,
    Year,
    YearMonth,
    value_kind,
)
from surfgraph.tags import handle_from_tag, tag_from_handle
from surfgraph.formats import CsvParser, SurfParser, SurfSerializer, parse_csv, parse_surf, serialize_surf
from surfgraph.keypath import ResourceConfiguration

__all__ = [
    # Errors
    "HandleError",
    "ParseError",
    "PropertyCardinalityError",
    "StateError",
    "ConfigValidationError",
    # Configuration
    "SurfConfig",
    "ResourceConfiguration",
    # Graph
    "Resource",
    "ResourceDescription",
    "SimpleGraphProcessor",
    "UrfProcessor",
    # Values
    "Character",
    "EmailAddress",
    "Iri",
    "MonthDay",
    "TelephoneNumber",
    "ValueKind",
    "Year",
    "YearMonth",
    "value_kind",
    # Tags
    "handle_from_tag",
    "tag_from_handle",
    # Formats
    "SurfParser",
    "SurfSerializer",
    "parse_surf",
    "serialize_surf",
    "CsvParser",
    "parse_csv",
]
