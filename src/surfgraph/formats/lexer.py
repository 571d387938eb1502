r"""
SURF literal lexer.

Stateless routines that read one literal from a Scanner or write one literal
to an output sink. Each literal kind is introduced by its own delimiter:

- Binary:             %base64url (unpadded)
- Boolean:            true / false
- Character:          'c'
- Email address:      ^local@domain
- IRI:                <iri>, <^email>, <+telephone>, <&uuid>
- Number:             123, -1.5e3; $123.45 for arbitrary precision
- Regular expression: /pattern/
- String:             "text"
- Telephone number:   +12015550123
- Temporal:           @2024-01-31T12:00:00Z, @--12-25, @12:00:00+01:00 ...
- UUID:               &01234567-89ab-cdef-0123-456789abcdef

Strings and characters share one escape set: \\ \/ \b \f \n \r \t \v, the
literal's own delimiter, and \uXXXX. A \uXXXX high surrogate must be followed
by an escaped low surrogate; writers pass characters outside the BMP through
unescaped.
"""

import base64
import binascii
import io
import re
import unicodedata
import uuid
from contextlib import contextmanager
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import IO, Any, Callable, Dict, Iterator, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from surfgraph.errors import ParseError
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

# =============================================================================
# Grammar
# =============================================================================

OBJECT_BEGIN = "*"
DESCRIPTION_BEGIN = ":"
DESCRIPTION_END = ";"
PROPERTY_VALUE_DELIMITER = "="
LIST_BEGIN = "["
LIST_END = "]"
MAP_BEGIN = "{"
MAP_END = "}"
MAP_KEY_DELIMITER = "\\"
ENTRY_KEY_VALUE_DELIMITER = ":"
SET_BEGIN = "("
SET_END = ")"
LABEL_DELIMITER = "|"
SEQUENCE_DELIMITER = ","
LINE_COMMENT_BEGIN = "!"

BINARY_BEGIN = "%"
CHARACTER_DELIMITER = "'"
STRING_DELIMITER = '"'
CHARACTER_ESCAPE = "\\"
EMAIL_ADDRESS_BEGIN = "^"
EMAIL_ADDRESS_LOCAL_PART_DELIMITER = "@"
IRI_BEGIN = "<"
IRI_END = ">"
NUMBER_DECIMAL_BEGIN = "$"
REGULAR_EXPRESSION_DELIMITER = "/"
REGULAR_EXPRESSION_ESCAPE = "\\"
TELEPHONE_NUMBER_BEGIN = "+"
TEMPORAL_BEGIN = "@"
TEMPORAL_ZONE_BEGIN = "["
TEMPORAL_ZONE_END = "]"
UUID_BEGIN = "&"

BOOLEAN_FALSE = "false"
BOOLEAN_TRUE = "true"

MAILTO_SCHEME = "mailto:"
TEL_SCHEME = "tel:"
UUID_URN_PREFIX = "urn:uuid:"

EOL_CHARS = frozenset("\n\r")
_EXTRA_WHITESPACE = frozenset("\t\v\f \u00a0\ufeff")

_BASE64URL_CHARS = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_")
_DIGITS = frozenset("0123456789")
_DOMAIN_CHARS = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-.")
_UUID_PATTERN = re.compile(r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}")

# escape letter -> character, for reading
_ESCAPES = {
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
}
# character -> escape letter, for writing
_REQUIRED_ESCAPES = {
    "\\": "\\",
    "\b": "b",
    "\f": "f",
    "\n": "n",
    "\r": "r",
    "\t": "t",
    "\v": "v",
}


def is_whitespace(ch: Optional[str]) -> bool:
    return ch is not None and (ch in _EXTRA_WHITESPACE or unicodedata.category(ch) == "Zs")


def is_eol(ch: Optional[str]) -> bool:
    return ch is not None and ch in EOL_CHARS


# =============================================================================
# Character cursor
# =============================================================================

Source = Union[str, bytes, Path, IO[str], IO[bytes]]


@contextmanager
def open_source(source: Source) -> Iterator[IO[str]]:
    """
    Open parser input as a text stream.

    Strings are treated as document content, paths are opened as UTF-8 files,
    and binary streams are decoded as UTF-8. Streams passed in are not closed.
    """
    if isinstance(source, Path):
        with open(source, "r", encoding="utf-8", newline="") as f:
            yield f
    elif isinstance(source, str):
        yield io.StringIO(source, newline="")
    elif isinstance(source, (bytes, bytearray)):
        yield io.StringIO(bytes(source).decode("utf-8"), newline="")
    elif isinstance(source, io.TextIOBase) or hasattr(source, "encoding"):
        yield source
    else:
        wrapper = io.TextIOWrapper(source, encoding="utf-8", newline="")
        try:
            yield wrapper
        finally:
            wrapper.detach()


class Scanner:
    """
    Lazy character cursor over a text stream with line/column tracking.

    Lines and columns are 1-based and refer to the next unread character.
    """

    CHUNK_SIZE = 8192

    def __init__(self, stream: IO[str], source: Optional[str] = None):
        self._stream = stream
        self._buffer = ""
        self._index = 0
        self._exhausted = False
        self.source = source
        self.line = 1
        self.column = 1
        self._after_cr = False
        # position of the most recently read character
        self.last_line = 1
        self.last_column = 1

    @classmethod
    def from_text(cls, text: str, source: Optional[str] = None) -> "Scanner":
        return cls(io.StringIO(text, newline=""), source)

    def _fill(self, count: int) -> bool:
        while len(self._buffer) - self._index < count:
            if self._exhausted:
                return False
            chunk = self._stream.read(self.CHUNK_SIZE)
            if not chunk:
                self._exhausted = True
                return False
            self._buffer = self._buffer[self._index:] + chunk
            self._index = 0
        return True

    def peek(self, offset: int = 0) -> Optional[str]:
        """The character `offset` places ahead, or None at end of input."""
        if not self._fill(offset + 1):
            return None
        return self._buffer[self._index + offset]

    def at_end(self) -> bool:
        return self.peek() is None

    def read(self) -> str:
        """
        Consume the next character.

        Raises:
            ParseError: at end of input
        """
        ch = self.peek()
        if ch is None:
            raise self.error("Unexpected end of data.")
        self._index += 1
        self.last_line = self.line
        self.last_column = self.column
        if ch == "\n" and self._after_cr:
            pass  # CRLF counts as one line break
        elif ch in EOL_CHARS:
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self._after_cr = ch == "\r"
        return ch

    def skip(self) -> None:
        self.read()

    def confirm(self, expected: str) -> bool:
        """Consume the next character if it is the expected one."""
        if self.peek() == expected:
            self.read()
            return True
        return False

    def check(self, expected: str) -> str:
        """
        Consume the next character, which must be the expected one.

        Raises:
            ParseError: if a different character or the end of input is found
        """
        ch = self.read()
        if ch != expected:
            raise self.unexpected(ch, expected)
        return ch

    def check_text(self, expected: str) -> str:
        for ch in expected:
            self.check(ch)
        return expected

    def read_required_count(self, count: int) -> str:
        return "".join(self.read() for _ in range(count))

    def read_until(self, delimiter: str) -> str:
        """Read up to (not including) the delimiter, which must be present."""
        chars = []
        while self.peek() != delimiter:
            chars.append(self.read())
        return "".join(chars)

    def read_while(self, chars: frozenset) -> str:
        result = []
        while (ch := self.peek()) is not None and ch in chars:
            result.append(self.read())
        return "".join(result)

    def error(self, message: str) -> ParseError:
        """A ParseError located at the next unread character."""
        return ParseError(message, self.line, self.column, self.source)

    def unexpected(self, ch: str, expected: Optional[str] = None) -> ParseError:
        """A ParseError located at the most recently read character."""
        message = f"Unexpected character {ch!r}"
        if expected is not None:
            message += f"; expected {expected!r}"
        return ParseError(message + ".", self.last_line, self.last_column, self.source)


# =============================================================================
# Readers
# =============================================================================

def _read_digits(scanner: Scanner, count: Optional[int] = None) -> str:
    """Read exactly `count` ASCII digits, or at least one if count is None."""
    if count is None:
        digits = scanner.read_while(_DIGITS)
        if not digits:
            ch = scanner.read()
            raise scanner.unexpected(ch, "digit")
        return digits
    digits = scanner.read_required_count(count)
    for ch in digits:
        if ch not in _DIGITS:
            raise scanner.error(f"Expected {count} digits, found {digits!r}.")
    return digits


def _read_escape(scanner: Scanner, delimiter: str) -> str:
    """Read the character after an escape character."""
    ch = scanner.read()
    if ch == delimiter:
        return ch
    if ch in _ESCAPES:
        return _ESCAPES[ch]
    if ch != "u":
        raise scanner.unexpected(ch, "escape sequence")
    code = _read_hex4(scanner)
    if 0xD800 <= code <= 0xDBFF:
        scanner.check(CHARACTER_ESCAPE)
        scanner.check("u")
        low = _read_hex4(scanner)
        if not 0xDC00 <= low <= 0xDFFF:
            raise scanner.error(f"Expected low surrogate after \\u{code:04X}, found \\u{low:04X}.")
        return chr(0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00))
    if 0xDC00 <= code <= 0xDFFF:
        raise scanner.error(f"Unpaired low surrogate \\u{code:04X}.")
    return chr(code)


def _read_hex4(scanner: Scanner) -> int:
    text = scanner.read_required_count(4)
    if not re.fullmatch(r"[0-9a-fA-F]{4}", text):
        raise scanner.error(f"Invalid Unicode escape \\u{text}.")
    return int(text, 16)


def read_binary(scanner: Scanner) -> bytes:
    scanner.check(BINARY_BEGIN)
    text = scanner.read_while(_BASE64URL_CHARS)
    if len(text) % 4 == 1:
        raise scanner.error(f"Invalid base64url length in binary literal {text!r}.")
    try:
        return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))
    except (binascii.Error, ValueError) as e:
        raise scanner.error(f"Invalid binary literal: {e}") from e


def read_boolean(scanner: Scanner) -> bool:
    ch = scanner.peek()
    if ch == BOOLEAN_TRUE[0]:
        scanner.check_text(BOOLEAN_TRUE)
        return True
    if ch == BOOLEAN_FALSE[0]:
        scanner.check_text(BOOLEAN_FALSE)
        return False
    raise scanner.unexpected(scanner.read(), "boolean")


def read_character(scanner: Scanner) -> Character:
    scanner.check(CHARACTER_DELIMITER)
    ch = scanner.read()
    if ch == CHARACTER_DELIMITER:
        raise scanner.unexpected(ch, "character")
    if ch == CHARACTER_ESCAPE:
        ch = _read_escape(scanner, CHARACTER_DELIMITER)
    scanner.check(CHARACTER_DELIMITER)
    return Character(ch)


def read_string(scanner: Scanner) -> str:
    scanner.check(STRING_DELIMITER)
    chars = []
    while (ch := scanner.read()) != STRING_DELIMITER:
        if ch == CHARACTER_ESCAPE:
            ch = _read_escape(scanner, STRING_DELIMITER)
        chars.append(ch)
    return "".join(chars)


def _read_quoted_local_part(scanner: Scanner) -> str:
    """Read a quoted local part verbatim, quotes and backslash pairs included."""
    chars = [scanner.check(STRING_DELIMITER)]
    while (ch := scanner.read()) != STRING_DELIMITER:
        chars.append(ch)
        if ch == CHARACTER_ESCAPE:
            chars.append(scanner.read())
    chars.append(ch)
    return "".join(chars)


def read_email_address(scanner: Scanner) -> EmailAddress:
    scanner.check(EMAIL_ADDRESS_BEGIN)
    if scanner.peek() == STRING_DELIMITER:
        local_part = _read_quoted_local_part(scanner)
    else:
        local_part = scanner.read_until(EMAIL_ADDRESS_LOCAL_PART_DELIMITER)
    scanner.check(EMAIL_ADDRESS_LOCAL_PART_DELIMITER)
    if scanner.peek() == "[":
        domain = scanner.read_until("]") + scanner.check("]")
    else:
        domain = scanner.read_while(_DOMAIN_CHARS)
    try:
        return EmailAddress(local_part, domain)
    except ValueError as e:
        raise scanner.error(str(e)) from e


def read_iri(scanner: Scanner) -> Iri:
    scanner.check(IRI_BEGIN)
    ch = scanner.peek()
    if ch == EMAIL_ADDRESS_BEGIN:
        text = MAILTO_SCHEME + str(read_email_address(scanner))
    elif ch == TELEPHONE_NUMBER_BEGIN:
        text = TEL_SCHEME + str(read_telephone_number(scanner))
    elif ch == UUID_BEGIN:
        text = UUID_URN_PREFIX + str(read_uuid(scanner))
    else:
        text = scanner.read_until(IRI_END)
    scanner.check(IRI_END)
    try:
        return Iri(text)
    except ValueError as e:
        raise scanner.error(str(e)) from e


def read_number(scanner: Scanner) -> Union[int, float, Decimal]:
    """
    Read a number.

    A leading `$` produces a Decimal. Otherwise a fraction or exponent
    produces a float and anything else an int.
    """
    is_decimal = scanner.confirm(NUMBER_DECIMAL_BEGIN)
    text = "-" if scanner.confirm("-") else ""
    text += _read_digits(scanner)
    is_integral = True
    if scanner.peek() == "." and scanner.peek(1) in _DIGITS:
        scanner.skip()
        text += "." + _read_digits(scanner)
        is_integral = False
    if scanner.peek() in ("e", "E"):
        scanner.skip()
        text += "e"
        if scanner.peek() in ("+", "-"):
            text += scanner.read()
        text += _read_digits(scanner)
        is_integral = False
    if is_decimal:
        try:
            return Decimal(text)
        except InvalidOperation as e:
            raise scanner.error(f"Invalid decimal number {text!r}.") from e
    return int(text) if is_integral else float(text)


def read_regular_expression(scanner: Scanner) -> re.Pattern:
    r"""
    Read a `/pattern/` literal.

    An escaped delimiter `\/` becomes a plain `/` in the compiled pattern, which
    matches the same text; a pattern holding `\/` therefore reads back as `/`.
    """
    scanner.check(REGULAR_EXPRESSION_DELIMITER)
    chars = []
    while (ch := scanner.read()) != REGULAR_EXPRESSION_DELIMITER:
        if ch == REGULAR_EXPRESSION_ESCAPE:
            escaped = scanner.read()
            if escaped != REGULAR_EXPRESSION_DELIMITER:
                chars.append(ch)
            ch = escaped
        chars.append(ch)
    pattern = "".join(chars)
    try:
        return re.compile(pattern)
    except re.error as e:
        raise scanner.error(f"Invalid regular expression /{pattern}/: {e}") from e


def read_telephone_number(scanner: Scanner) -> TelephoneNumber:
    scanner.check(TELEPHONE_NUMBER_BEGIN)
    return TelephoneNumber(TELEPHONE_NUMBER_BEGIN + _read_digits(scanner))


def read_uuid(scanner: Scanner) -> uuid.UUID:
    scanner.check(UUID_BEGIN)
    text = scanner.read_required_count(36)
    if not _UUID_PATTERN.fullmatch(text):
        raise scanner.error(f"Invalid UUID {text!r}.")
    return uuid.UUID(text)


def _read_fraction(scanner: Scanner) -> int:
    """Read an optional `.fff` and return microseconds."""
    if not scanner.confirm("."):
        return 0
    digits = _read_digits(scanner)
    if digits[6:].strip("0"):
        raise scanner.error(f"Fractional seconds .{digits} exceed microsecond precision.")
    return int(digits[:6].ljust(6, "0"))


def _read_time_fields(scanner: Scanner, hour: str) -> tuple:
    scanner.check(":")
    minute = _read_digits(scanner, 2)
    scanner.check(":")
    second = _read_digits(scanner, 2)
    return int(hour), int(minute), int(second), _read_fraction(scanner)


def _read_offset(scanner: Scanner) -> Optional[timezone]:
    if scanner.confirm("Z"):
        return timezone.utc
    sign = scanner.peek()
    if sign not in ("+", "-"):
        return None
    scanner.skip()
    hours = int(_read_digits(scanner, 2))
    scanner.check(":")
    minutes = int(_read_digits(scanner, 2))
    offset = timedelta(hours=hours, minutes=minutes)
    if offset >= timedelta(hours=24):
        raise scanner.error(f"Offset {sign}{hours:02d}:{minutes:02d} out of range.")
    return timezone(-offset if sign == "-" else offset)


def read_temporal(scanner: Scanner) -> Any:
    """
    Read a temporal literal.

    Returns:
        MonthDay, Year, YearMonth, date, time or datetime depending on the form;
        datetimes with a `[zone]` suffix use ZoneInfo
    """
    scanner.check(TEMPORAL_BEGIN)
    try:
        if scanner.confirm("-"):
            scanner.check("-")
            month = int(_read_digits(scanner, 2))
            scanner.check("-")
            return MonthDay(month, int(_read_digits(scanner, 2)))
        first = _read_digits(scanner, 2)
        if scanner.peek() == ":":
            hour, minute, second, micro = _read_time_fields(scanner, first)
            return time(hour, minute, second, micro, tzinfo=_read_offset(scanner))
        year = int(first + _read_digits(scanner, 2))
        if not scanner.confirm("-"):
            return Year(year)
        month = int(_read_digits(scanner, 2))
        if not scanner.confirm("-"):
            return YearMonth(year, month)
        day = int(_read_digits(scanner, 2))
        if not scanner.confirm("T"):
            return date(year, month, day)
        hour, minute, second, micro = _read_time_fields(scanner, _read_digits(scanner, 2))
        offset = _read_offset(scanner)
        value = datetime(year, month, day, hour, minute, second, micro, tzinfo=offset)
        if offset is not None and scanner.confirm(TEMPORAL_ZONE_BEGIN):
            zone_id = scanner.read_until(TEMPORAL_ZONE_END)
            scanner.check(TEMPORAL_ZONE_END)
            try:
                zone = ZoneInfo(zone_id)
            except (ZoneInfoNotFoundError, ValueError) as e:
                raise scanner.error(f"Unknown time zone {zone_id!r}.") from e
            zoned = value.astimezone(zone)
            if zoned.utcoffset() != offset.utcoffset(None):
                raise scanner.error(f"Offset does not match time zone {zone_id!r}.")
            value = zoned
        return value
    except ParseError:
        raise
    except ValueError as e:
        raise scanner.error(f"Invalid temporal literal: {e}") from e


LiteralReader = Callable[[Scanner], Any]

LITERAL_READERS: Dict[str, LiteralReader] = {
    BINARY_BEGIN: read_binary,
    BOOLEAN_TRUE[0]: read_boolean,
    BOOLEAN_FALSE[0]: read_boolean,
    CHARACTER_DELIMITER: read_character,
    EMAIL_ADDRESS_BEGIN: read_email_address,
    IRI_BEGIN: read_iri,
    NUMBER_DECIMAL_BEGIN: read_number,
    "-": read_number,
    **{digit: read_number for digit in "0123456789"},
    REGULAR_EXPRESSION_DELIMITER: read_regular_expression,
    STRING_DELIMITER: read_string,
    TELEPHONE_NUMBER_BEGIN: read_telephone_number,
    TEMPORAL_BEGIN: read_temporal,
    UUID_BEGIN: read_uuid,
}


def read_literal(scanner: Scanner) -> Any:
    """Read whichever literal the next character introduces."""
    ch = scanner.peek()
    reader = LITERAL_READERS.get(ch) if ch is not None else None
    if reader is None:
        if ch is None:
            raise scanner.error("Unexpected end of data; expected literal.")
        raise scanner.unexpected(scanner.read(), "literal")
    return reader(scanner)


# =============================================================================
# Writers
# =============================================================================

def _write_escaped(out: IO[str], text: str, delimiter: str) -> None:
    for ch in text:
        if ch == delimiter:
            out.write(CHARACTER_ESCAPE + ch)
        elif ch in _REQUIRED_ESCAPES:
            out.write(CHARACTER_ESCAPE + _REQUIRED_ESCAPES[ch])
        else:
            category = unicodedata.category(ch)
            if category == "Cs":
                raise ValueError(f"Unpaired surrogate U+{ord(ch):04X} cannot be written.")
            if category == "Cc":
                out.write(f"\\u{ord(ch):04X}")
            else:
                out.write(ch)


def write_binary(out: IO[str], value: bytes) -> None:
    out.write(BINARY_BEGIN)
    out.write(base64.urlsafe_b64encode(bytes(value)).rstrip(b"=").decode("ascii"))


def write_boolean(out: IO[str], value: bool) -> None:
    out.write(BOOLEAN_TRUE if value else BOOLEAN_FALSE)


def write_character(out: IO[str], value: Character) -> None:
    out.write(CHARACTER_DELIMITER)
    _write_escaped(out, value.value, CHARACTER_DELIMITER)
    out.write(CHARACTER_DELIMITER)


def write_string(out: IO[str], value: str) -> None:
    out.write(STRING_DELIMITER)
    _write_escaped(out, value, STRING_DELIMITER)
    out.write(STRING_DELIMITER)


def write_email_address(out: IO[str], value: EmailAddress) -> None:
    out.write(EMAIL_ADDRESS_BEGIN)
    out.write(str(value))


def write_iri(out: IO[str], value: Iri) -> None:
    text = value.value
    out.write(IRI_BEGIN)
    if text.startswith(MAILTO_SCHEME):
        try:
            email = EmailAddress.parse(text[len(MAILTO_SCHEME):])
        except ValueError:
            email = None
        if email is not None and str(email) == text[len(MAILTO_SCHEME):]:
            write_email_address(out, email)
            out.write(IRI_END)
            return
    elif text.startswith(TEL_SCHEME) and re.fullmatch(r"\+[0-9]+", text[len(TEL_SCHEME):]):
        out.write(text[len(TEL_SCHEME):])
        out.write(IRI_END)
        return
    elif text.startswith(UUID_URN_PREFIX):
        rest = text[len(UUID_URN_PREFIX):]
        if _UUID_PATTERN.fullmatch(rest) and rest == rest.lower():
            out.write(UUID_BEGIN + rest)
            out.write(IRI_END)
            return
    out.write(text)
    out.write(IRI_END)


def write_integer(out: IO[str], value: int) -> None:
    out.write(str(value))


def write_decimal(out: IO[str], value: Decimal) -> None:
    if not value.is_finite():
        raise ValueError(f"Decimal {value} cannot be written.")
    out.write(NUMBER_DECIMAL_BEGIN)
    out.write(str(value))


def write_real(out: IO[str], value: float) -> None:
    if value != value or value in (float("inf"), float("-inf")):
        raise ValueError(f"Real number {value} cannot be written.")
    out.write(repr(value))


def write_regular_expression(out: IO[str], value: re.Pattern) -> None:
    if not isinstance(value.pattern, str):
        raise ValueError("Only text regular expressions can be written.")
    if value.flags & ~re.UNICODE:
        raise ValueError(f"Regular expression flags cannot be written: /{value.pattern}/")
    pattern = value.pattern
    out.write(REGULAR_EXPRESSION_DELIMITER)
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if ch == REGULAR_EXPRESSION_ESCAPE and i + 1 < len(pattern):
            out.write(pattern[i:i + 2])
            i += 2
            continue
        if ch == REGULAR_EXPRESSION_DELIMITER:
            out.write(REGULAR_EXPRESSION_ESCAPE)
        out.write(ch)
        i += 1
    out.write(REGULAR_EXPRESSION_DELIMITER)


def write_telephone_number(out: IO[str], value: TelephoneNumber) -> None:
    out.write(value.number)


def write_uuid(out: IO[str], value: uuid.UUID) -> None:
    out.write(UUID_BEGIN)
    out.write(str(value))


def _format_offset(offset: timedelta) -> str:
    if offset % timedelta(minutes=1):
        raise ValueError(f"Offset {offset} has seconds and cannot be written.")
    if not offset:
        return "Z"
    sign = "-" if offset < timedelta(0) else "+"
    minutes = abs(offset) // timedelta(minutes=1)
    return f"{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def write_temporal(out: IO[str], value: Any) -> None:
    out.write(TEMPORAL_BEGIN)
    if isinstance(value, (Year, YearMonth, MonthDay)):
        out.write(str(value))
    elif isinstance(value, datetime):
        out.write(value.replace(tzinfo=None).isoformat())
        offset = value.utcoffset()
        if offset is not None:
            out.write(_format_offset(offset))
            if isinstance(value.tzinfo, ZoneInfo):
                out.write(f"{TEMPORAL_ZONE_BEGIN}{value.tzinfo.key}{TEMPORAL_ZONE_END}")
    elif isinstance(value, date):
        out.write(value.isoformat())
    elif isinstance(value, time):
        if isinstance(value.tzinfo, ZoneInfo):
            raise ValueError("Times cannot be written with a time zone, only an offset.")
        out.write(value.replace(tzinfo=None).isoformat())
        offset = value.utcoffset()
        if offset is not None:
            out.write(_format_offset(offset))
    else:
        raise TypeError(f"Unsupported temporal type: {type(value).__name__}")


LiteralWriter = Callable[[IO[str], Any], None]

LITERAL_WRITERS: Dict[ValueKind, LiteralWriter] = {
    ValueKind.BINARY: write_binary,
    ValueKind.BOOLEAN: write_boolean,
    ValueKind.CHARACTER: write_character,
    ValueKind.EMAIL_ADDRESS: write_email_address,
    ValueKind.IRI: write_iri,
    ValueKind.INTEGER: write_integer,
    ValueKind.DECIMAL: write_decimal,
    ValueKind.REAL: write_real,
    ValueKind.REGULAR_EXPRESSION: write_regular_expression,
    ValueKind.STRING: write_string,
    ValueKind.TELEPHONE_NUMBER: write_telephone_number,
    ValueKind.TEMPORAL: write_temporal,
    ValueKind.UUID: write_uuid,
}


def write_literal(out: IO[str], value: Any) -> None:
    """
    Write any literal value.

    Raises:
        TypeError: if the value is not a literal
    """
    kind = value_kind(value)
    writer = LITERAL_WRITERS.get(kind)
    if writer is None:
        raise TypeError(f"{kind.value} values are not literals.")
    writer(out, value)
