"""
CSV importer.

Turns each row of a CSV file into one subject resource, emitted through the
same graph processor protocol as the SURF parser. Each header names the
property of its column using a small grammar:

    name            untyped column; values are strings
    name:Type       typed column; URF literal types (urf-Integer, urf-Boolean,
                    urf-LocalDate, ...) are parsed as literals, any other type
                    makes the value a reference to the Type#value resource
    #name           the ID column; its value identifies the row subject
    |<tag>|         a property given by its full tag instead of a handle
    !anything       an ignored column

Empty fields produce no statement.
"""

import io
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import IO, Any, Callable, Dict, List, Mapping, Optional, Union
from zoneinfo import ZoneInfo

import polars as pl
import pyparsing as pp
from pyparsing import Literal as Lit, Opt, Regex, StringEnd, Suppress

from surfgraph.errors import HandleError, ParseError, PropertyCardinalityError, StateError
from surfgraph.formats.lexer import (
    BINARY_BEGIN,
    EMAIL_ADDRESS_BEGIN,
    IRI_BEGIN,
    IRI_END,
    NUMBER_DECIMAL_BEGIN,
    TEMPORAL_BEGIN,
    UUID_BEGIN,
    Scanner,
    read_binary,
    read_boolean,
    read_email_address,
    read_iri,
    read_number,
    read_telephone_number,
    read_temporal,
    read_uuid,
)
from surfgraph.graph import SimpleGraphProcessor, UrfProcessor
from surfgraph.model import Character, MonthDay, Year, YearMonth
from surfgraph import tags
from surfgraph.tags import generate_blank_tag, handle_from_tag, tag_for_instance, tag_from_handle

logger = logging.getLogger(__name__)

CsvSource = Union[str, bytes, Path, IO[str], IO[bytes]]


@dataclass(frozen=True)
class CsvColumn:
    """A parsed column header."""
    header: str
    property_tag: Optional[str] = None
    type_tag: Optional[str] = None
    is_id: bool = False

    @property
    def ignored(self) -> bool:
        return self.property_tag is None


def _reference(prefix: str) -> pp.ParserElement:
    """A handle, or a full tag between `|<` and `>|`, named `<prefix>_handle` or `<prefix>_tag`."""
    tag = Suppress(Lit("|<")) + Regex(r"[^<>\s]+")(f"{prefix}_tag") + Suppress(Lit(">|"))
    handle = Regex(r"[^\s!#:|<>][^\s:|<>]*")(f"{prefix}_handle")
    return tag | handle


def _build_header_grammar() -> pp.ParserElement:
    ignored = Lit("!")("ignored") + pp.rest_of_line
    column = (
        Opt(Lit("#"))("id")
        + _reference("property")
        + Opt(Suppress(Lit(":")) + _reference("type"))
    )
    return (ignored | column) + StringEnd()


_HEADER_GRAMMAR = _build_header_grammar()


# =============================================================================
# Typed field conversion
# =============================================================================

def _lexical(reader: Callable[[Scanner], Any], prefix: str = "", suffix: str = "") -> Callable[[str], Any]:
    """A converter that reads a field with a lexer routine, adding any delimiters the field omits."""
    def convert(text: str) -> Any:
        scanner = Scanner.from_text(prefix + text + suffix)
        value = reader(scanner)
        if not scanner.at_end():
            raise scanner.error("Unexpected characters after value.")
        return value
    return convert


def _checked(convert: Callable[[str], Any], accept: Callable[[Any], bool], description: str) -> Callable[[str], Any]:
    def check(text: str) -> Any:
        value = convert(text)
        if not accept(value):
            raise ValueError(f"{text!r} is not {description}")
        return value
    return check


_read_temporal_field = _lexical(read_temporal, TEMPORAL_BEGIN)
_read_number_field = _lexical(read_number)


def _is_naive_datetime(value: Any) -> bool:
    return isinstance(value, datetime) and value.tzinfo is None


def _is_offset_datetime(value: Any) -> bool:
    return isinstance(value, datetime) and value.tzinfo is not None


LITERAL_CONVERTERS: Dict[str, Callable[[str], Any]] = {
    tags.STRING_TYPE_TAG: str,
    tags.BOOLEAN_TYPE_TAG: _lexical(read_boolean),
    tags.CHARACTER_TYPE_TAG: Character,
    tags.INTEGER_TYPE_TAG: _checked(_read_number_field, lambda v: isinstance(v, int), "an integer"),
    tags.DECIMAL_TYPE_TAG: _lexical(read_number, NUMBER_DECIMAL_BEGIN),
    tags.REAL_TYPE_TAG: lambda text: float(_read_number_field(text)),
    tags.BINARY_TYPE_TAG: _lexical(read_binary, BINARY_BEGIN),
    tags.IRI_TYPE_TAG: _lexical(read_iri, IRI_BEGIN, IRI_END),
    tags.EMAIL_ADDRESS_TYPE_TAG: _lexical(read_email_address, EMAIL_ADDRESS_BEGIN),
    tags.TELEPHONE_NUMBER_TYPE_TAG: _lexical(read_telephone_number),
    tags.UUID_TYPE_TAG: _lexical(read_uuid, UUID_BEGIN),
    tags.REGULAR_EXPRESSION_TYPE_TAG: re.compile,
    tags.YEAR_TYPE_TAG: _checked(_read_temporal_field, lambda v: isinstance(v, Year), "a year"),
    tags.YEAR_MONTH_TYPE_TAG: _checked(_read_temporal_field, lambda v: isinstance(v, YearMonth), "a year-month"),
    tags.MONTH_DAY_TYPE_TAG: _checked(_read_temporal_field, lambda v: isinstance(v, MonthDay), "a month-day"),
    tags.LOCAL_DATE_TYPE_TAG: _checked(
        _read_temporal_field, lambda v: isinstance(v, date) and not isinstance(v, datetime), "a local date"),
    tags.LOCAL_TIME_TYPE_TAG: _checked(
        _read_temporal_field, lambda v: isinstance(v, time) and v.tzinfo is None, "a local time"),
    tags.OFFSET_TIME_TYPE_TAG: _checked(
        _read_temporal_field, lambda v: isinstance(v, time) and v.tzinfo is not None, "an offset time"),
    tags.LOCAL_DATE_TIME_TYPE_TAG: _checked(_read_temporal_field, _is_naive_datetime, "a local date-time"),
    tags.OFFSET_DATE_TIME_TYPE_TAG: _checked(_read_temporal_field, _is_offset_datetime, "an offset date-time"),
    tags.INSTANT_TYPE_TAG: _checked(
        _read_temporal_field,
        lambda v: _is_offset_datetime(v) and v.utcoffset() == timedelta(0) and not isinstance(v.tzinfo, ZoneInfo),
        "an instant"),
    tags.ZONED_DATE_TIME_TYPE_TAG: _checked(
        _read_temporal_field, lambda v: isinstance(v, datetime) and isinstance(v.tzinfo, ZoneInfo),
        "a zoned date-time"),
}


class CsvParser:
    """
    Importer producing one subject resource per CSV row.

    A parser is single-use. The parsed column headers are available from
    `columns` once parsing has started.
    """

    def __init__(
        self,
        processor: Optional[UrfProcessor] = None,
        namespaces: Optional[Mapping[str, str]] = None,
    ):
        self.processor = processor if processor is not None else SimpleGraphProcessor()
        self.namespaces: Dict[str, str] = dict(namespaces or {})
        self._columns: Optional[List[CsvColumn]] = None
        self._used = False

    @property
    def columns(self) -> List[CsvColumn]:
        if self._columns is None:
            raise StateError("Columns are not available until parsing has started.")
        return list(self._columns)

    def parse(self, source: CsvSource, subject_type_tag: Optional[str] = None) -> List[Any]:
        """
        Import CSV content.

        Args:
            source: CSV content as a string, bytes, file path or stream
            subject_type_tag: Type of the row subjects; with an ID column each
                subject is tagged `subject_type_tag#id`

        Returns:
            The processor's result; for a SimpleGraphProcessor, the row subjects

        Raises:
            ParseError: for malformed headers or fields, with row and column
            StateError: if this parser has already been used
        """
        if self._used:
            raise StateError("A CsvParser can only parse one document.")
        self._used = True
        frame = self._read_frame(source)
        self._columns = [
            self.parse_header(header, index + 1) for index, header in enumerate(frame.columns)
        ]
        id_columns = [index for index, column in enumerate(self._columns) if column.is_id]
        if len(id_columns) > 1:
            raise ParseError("Only one ID column is allowed.", 1, id_columns[1] + 1)
        id_index = id_columns[0] if id_columns else None

        count = 0
        for row_number, row in enumerate(frame.iter_rows(), start=2):
            self._process_row(row, row_number, id_index, subject_type_tag)
            count += 1
        logger.debug(f"Imported {count} CSV rows with {len(self._columns)} columns")
        return self.processor.get_result()

    def parse_header(self, header: str, column_number: int = 1) -> CsvColumn:
        """
        Parse one column header.

        Raises:
            ParseError: if the header does not follow the header grammar
        """
        try:
            result = _HEADER_GRAMMAR.parse_string(header, parse_all=True)
        except pp.ParseException as e:
            raise ParseError(f"Invalid column header {header!r}: {e.msg}", 1, column_number) from e
        if result.get("ignored"):
            return CsvColumn(header)
        try:
            property_tag = self._resolve_reference(result, "property")
            type_tag = self._resolve_reference(result, "type")
        except HandleError as e:
            raise ParseError(f"Invalid column header {header!r}: {e}", 1, column_number) from e
        return CsvColumn(header, property_tag, type_tag, is_id=bool(result.get("id")))

    def _resolve_reference(self, result: pp.ParseResults, prefix: str) -> Optional[str]:
        tag = result.get(f"{prefix}_tag")
        if tag is not None:
            tags.check_absolute(tag)
            return tag
        handle = result.get(f"{prefix}_handle")
        if handle is None:
            return None
        return tag_from_handle(handle, self.namespaces)

    @staticmethod
    def _read_frame(source: CsvSource) -> pl.DataFrame:
        if isinstance(source, Path):
            data: Any = source
        elif isinstance(source, str):
            data = io.BytesIO(source.encode("utf-8"))
        elif isinstance(source, (bytes, bytearray)):
            data = io.BytesIO(bytes(source))
        else:
            content = source.read()
            data = io.BytesIO(content.encode("utf-8") if isinstance(content, str) else content)
        try:
            return pl.read_csv(data, has_header=True, infer_schema_length=0)
        except pl.exceptions.NoDataError:
            return pl.DataFrame()
        except pl.exceptions.PolarsError as e:
            raise ParseError(f"Unable to read CSV: {e}", 1, 1) from e

    def _process_row(
        self,
        row: tuple,
        row_number: int,
        id_index: Optional[int],
        subject_type_tag: Optional[str],
    ) -> None:
        row_id = row[id_index] if id_index is not None else None
        try:
            if not row_id:
                tag = generate_blank_tag()
            elif subject_type_tag:
                tag = tag_for_instance(subject_type_tag, row_id)
            else:
                tag = generate_blank_tag(row_id)
            subject = self.processor.declare_resource(tag, subject_type_tag)
        except ValueError as e:
            raise ParseError(str(e), row_number, (id_index or 0) + 1) from e

        for index, (column, field) in enumerate(zip(self._columns, row)):
            if column.ignored or field is None or field == "":
                continue
            value = self._convert(column, field, row_number, index + 1)
            try:
                self.processor.process_statement(subject, column.property_tag, value)
            except PropertyCardinalityError as e:
                raise ParseError(str(e), row_number, index + 1) from e
        self.processor.report_root(subject)

    def _convert(self, column: CsvColumn, field: str, row_number: int, column_number: int) -> Any:
        if column.type_tag is None:
            return field
        converter = LITERAL_CONVERTERS.get(column.type_tag)
        try:
            if converter is not None:
                return converter(field)
            return self.processor.declare_resource(
                tag_for_instance(column.type_tag, field), column.type_tag
            )
        except (ValueError, re.error) as e:
            type_name = handle_from_tag(column.type_tag) or column.type_tag
            message = e.message if isinstance(e, ParseError) else str(e)
            raise ParseError(
                f"Invalid {type_name} value {field!r} in column {column.header!r}: {message}",
                row_number,
                column_number,
            ) from e


def parse_csv(
    source: CsvSource,
    subject_type_tag: Optional[str] = None,
    namespaces: Optional[Mapping[str, str]] = None,
    processor: Optional[UrfProcessor] = None,
) -> List[Any]:
    """
    Import CSV content.

    Args:
        source: CSV content as a string, bytes, file path or stream
        subject_type_tag: Type of the row subjects
        namespaces: Namespace IRIs keyed by handle alias
        processor: Graph processor; a SimpleGraphProcessor by default

    Returns:
        The row subject resources
    """
    parser = CsvParser(processor, namespaces)
    return parser.parse(source, subject_type_tag)
