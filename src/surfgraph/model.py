"""
Value model.

Every value in a resource graph belongs to exactly one ValueKind. Most kinds
map onto standard Python types; the few with no standard counterpart are
small frozen dataclasses defined here.
"""

import re
import uuid
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any
from urllib.parse import urlsplit

_ATEXT = r"[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]"
_DOT_ATOM = rf"{_ATEXT}+(?:\.{_ATEXT}+)*"
_LOCAL_PART_PATTERN = re.compile(rf'(?:{_DOT_ATOM}|"(?:[^"\\\r\n]|\\.)*")')
_DOMAIN_PATTERN = re.compile(rf"(?:{_DOT_ATOM}|\[[^\[\]\\\s]*\])")


class ValueKind(Enum):
    """The closed set of value categories a graph may hold."""
    RESOURCE = "resource"
    BINARY = "binary"
    BOOLEAN = "boolean"
    CHARACTER = "character"
    EMAIL_ADDRESS = "email_address"
    IRI = "iri"
    INTEGER = "integer"
    DECIMAL = "decimal"
    REAL = "real"
    REGULAR_EXPRESSION = "regular_expression"
    STRING = "string"
    TELEPHONE_NUMBER = "telephone_number"
    TEMPORAL = "temporal"
    UUID = "uuid"
    LIST = "list"
    MAP = "map"
    SET = "set"


COLLECTION_KINDS = frozenset({ValueKind.LIST, ValueKind.MAP, ValueKind.SET})
LITERAL_KINDS = frozenset(ValueKind) - COLLECTION_KINDS - {ValueKind.RESOURCE}


@dataclass(frozen=True)
class Character:
    """A single Unicode code point."""
    value: str

    def __post_init__(self):
        if len(self.value) != 1:
            raise ValueError(f"Character must be exactly one code point: {self.value!r}")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Iri:
    """An absolute IRI used as a literal value."""
    value: str

    def __post_init__(self):
        if not urlsplit(self.value).scheme or any(ch.isspace() for ch in self.value):
            raise ValueError(f"IRI must be absolute: {self.value!r}")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class EmailAddress:
    """An email address with a dot-atom or quoted local part."""
    local_part: str
    domain: str

    def __post_init__(self):
        if not _LOCAL_PART_PATTERN.fullmatch(self.local_part):
            raise ValueError(f"Invalid email local part: {self.local_part!r}")
        if not _DOMAIN_PATTERN.fullmatch(self.domain):
            raise ValueError(f"Invalid email domain: {self.domain!r}")

    @classmethod
    def parse(cls, text: str) -> "EmailAddress":
        local_part, at, domain = text.rpartition("@")
        if not at:
            raise ValueError(f"Email address {text!r} has no domain.")
        return cls(local_part, domain)

    def __str__(self) -> str:
        return f"{self.local_part}@{self.domain}"


@dataclass(frozen=True)
class TelephoneNumber:
    """A telephone number in global form: `+` followed by digits."""
    number: str

    def __post_init__(self):
        if not re.fullmatch(r"\+[0-9]+", self.number):
            raise ValueError(f"Invalid telephone number: {self.number!r}")

    def __str__(self) -> str:
        return self.number


@dataclass(frozen=True, order=True)
class Year:
    value: int

    def __post_init__(self):
        if not 0 <= self.value <= 9999:
            raise ValueError(f"Year out of range: {self.value}")

    def __str__(self) -> str:
        return f"{self.value:04d}"


@dataclass(frozen=True, order=True)
class YearMonth:
    year: int
    month: int

    def __post_init__(self):
        date(self.year, self.month, 1)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


@dataclass(frozen=True, order=True)
class MonthDay:
    month: int
    day: int

    def __post_init__(self):
        # leap year so that --02-29 is allowed
        date(2000, self.month, self.day)

    def __str__(self) -> str:
        return f"--{self.month:02d}-{self.day:02d}"


TEMPORAL_TYPES = (date, time, datetime, Year, YearMonth, MonthDay)

# Checked in order; bool before int, and datetime is covered by TEMPORAL_TYPES.
_KIND_BY_TYPE = (
    (bool, ValueKind.BOOLEAN),
    (int, ValueKind.INTEGER),
    (Decimal, ValueKind.DECIMAL),
    (float, ValueKind.REAL),
    (str, ValueKind.STRING),
    (Character, ValueKind.CHARACTER),
    ((bytes, bytearray), ValueKind.BINARY),
    (Iri, ValueKind.IRI),
    (EmailAddress, ValueKind.EMAIL_ADDRESS),
    (TelephoneNumber, ValueKind.TELEPHONE_NUMBER),
    (re.Pattern, ValueKind.REGULAR_EXPRESSION),
    (uuid.UUID, ValueKind.UUID),
    (TEMPORAL_TYPES, ValueKind.TEMPORAL),
    (list, ValueKind.LIST),
    (dict, ValueKind.MAP),
    ((set, frozenset), ValueKind.SET),
)


def value_kind(value: Any) -> ValueKind:
    """
    Classify a value.

    Raises:
        TypeError: if the value is not representable in a resource graph
    """
    for types, kind in _KIND_BY_TYPE:
        if isinstance(value, types):
            return kind
    # Resources are recognized structurally so other descriptions can take part.
    if hasattr(value, "type_tag") and hasattr(value, "property_tags"):
        return ValueKind.RESOURCE
    raise TypeError(f"Unsupported value type: {type(value).__name__}")
