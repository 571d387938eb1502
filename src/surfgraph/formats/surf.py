"""
SURF (Simple URF) Parser and Serializer.

SURF describes a graph of resources:

    |<https://example.com/jdoe>|*Person:
      name = "Jane Doe"
      birthday = @1980-03-04
      email = ^jdoe@example.com
      tags = ["one", "two"]
      favorites = {"color": "blue", 'c': 3}
      friends+ = |"jsmith"|*Person
      friends+ = |ally|*Person:name="Ally";
    ;

Supports:
- Objects (`*Type`) with `:`...`;` property blocks
- Lists `[...]`, maps `{key: value}`, sets `(...)`
- Every literal kind of the lexer
- Labels: `|<tag>|`, `|"id"|` (with a type) and `|alias|` for sharing and
  forward references
- Comments from `!` to end of line
- Items separated by commas, line breaks, or both

Parsing emits declarations and statements to a graph processor; see
surfgraph.graph.
"""

import io
import logging
from dataclasses import replace
from enum import Enum
from pathlib import Path
from typing import IO, Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from surfgraph.config import SurfConfig
from surfgraph.errors import HandleError, ParseError, PropertyCardinalityError, StateError
from surfgraph.formats.lexer import (
    DESCRIPTION_BEGIN,
    DESCRIPTION_END,
    ENTRY_KEY_VALUE_DELIMITER,
    IRI_BEGIN,
    LABEL_DELIMITER,
    LINE_COMMENT_BEGIN,
    LIST_BEGIN,
    LIST_END,
    LITERAL_READERS,
    MAP_BEGIN,
    MAP_END,
    MAP_KEY_DELIMITER,
    OBJECT_BEGIN,
    PROPERTY_VALUE_DELIMITER,
    SEQUENCE_DELIMITER,
    SET_BEGIN,
    SET_END,
    STRING_DELIMITER,
    Scanner,
    Source,
    is_eol,
    is_whitespace,
    open_source,
    read_iri,
    read_literal,
    read_string,
    write_iri,
    write_literal,
    write_string,
)
from surfgraph.graph import SimpleGraphProcessor, UrfProcessor
from surfgraph.model import Iri, ValueKind, value_kind
from surfgraph.names import (
    ID_DELIMITER,
    NAMESPACE_ALIAS_DELIMITER,
    PLURAL_MARKER,
    SEGMENT_DELIMITER,
    is_name_token_begin,
    is_name_token_char,
)
from surfgraph.tags import (
    generate_blank_tag,
    handle_from_tag,
    id_of,
    tag_for_instance,
    tag_from_handle,
    type_tag_of,
)

logger = logging.getLogger(__name__)

_HANDLE_PUNCTUATION = frozenset(
    (ID_DELIMITER, NAMESPACE_ALIAS_DELIMITER, PLURAL_MARKER, SEGMENT_DELIMITER)
)
_COLLECTION_BEGINS = frozenset((LIST_BEGIN, MAP_BEGIN, SET_BEGIN))


class LabelKind(Enum):
    TAG = "tag"
    ID = "id"
    ALIAS = "alias"


class SurfParser:
    """
    Parser for SURF documents.

    A parser is single-use: it holds the label table and cursor of one
    document. Create a new parser for each document.
    """

    def __init__(
        self,
        processor: Optional[UrfProcessor] = None,
        namespaces: Optional[Mapping[str, str]] = None,
    ):
        """
        Args:
            processor: Receives declarations and statements; a
                SimpleGraphProcessor by default
            namespaces: Namespace IRIs keyed by handle alias
        """
        self.processor = processor if processor is not None else SimpleGraphProcessor()
        self.namespaces: Dict[str, str] = dict(namespaces or {})
        self._labels: Dict[str, Any] = {}
        # alias -> (line, column) of the first reference before its definition
        self._forward_aliases: Dict[str, Tuple[int, int]] = {}
        self._scanner: Optional[Scanner] = None
        self._used = False

    def parse(self, source: Source, source_name: Optional[str] = None) -> Any:
        """
        Parse a SURF document.

        Args:
            source: SURF content as a string, bytes, file path or stream
            source_name: Name used in error messages

        Returns:
            The root resource, or None for an empty document

        Raises:
            ParseError: on malformed input
            StateError: if this parser has already been used
        """
        if self._used:
            raise StateError("A SurfParser can only parse one document.")
        self._used = True
        if source_name is None and isinstance(source, Path):
            source_name = str(source)
        with open_source(source) as stream:
            self._scanner = Scanner(stream, source_name)
            root = self._parse_document()
        logger.debug(f"Parsed SURF document {source_name or ''} with {len(self._labels)} labels")
        return root

    # -------------------------------------------------------------------------
    # Document structure
    # -------------------------------------------------------------------------

    def _parse_document(self) -> Any:
        scanner = self._scanner
        root = None
        if self._skip_line_breaks() is not None:
            root = self._parse_resource()
            self.processor.report_root(root)
            if self._skip_line_breaks() is not None:
                raise scanner.error("No content allowed after the root resource.")
        if self._forward_aliases:
            alias, (line, column) = next(iter(self._forward_aliases.items()))
            raise ParseError(f"Unresolved label reference |{alias}|.", line, column, scanner.source)
        return root

    def _parse_resource(self, allow_description: bool = True) -> Any:
        """Parse a resource, which may be a label reference, object, collection or literal."""
        scanner = self._scanner
        label = None
        label_position = (scanner.line, scanner.column)
        if scanner.peek() == LABEL_DELIMITER:
            label = self._parse_label()
            ch = self._skip_filler()
            if not self._begins_resource(ch):
                return self._resolve_reference(label, label_position)
        ch = scanner.peek()
        if ch == OBJECT_BEGIN:
            return self._parse_object(label, label_position, allow_description)
        if label is not None and label[0] is not LabelKind.ALIAS:
            raise scanner.error(f"Only objects may have a {label[0].value} label.")
        alias = label[1] if label is not None else None
        if alias is not None:
            self._check_new_alias(alias, label_position)
            if alias in self._forward_aliases:
                line, column = self._forward_aliases[alias]
                raise ParseError(
                    f"Label |{alias}| was referenced before its definition, which is not an object.",
                    line, column, scanner.source,
                )
        if ch == LIST_BEGIN:
            return self._parse_list(alias)
        if ch == MAP_BEGIN:
            return self._parse_map(alias)
        if ch == SET_BEGIN:
            value = self._parse_set()
        elif ch is None:
            raise scanner.error("Unexpected end of data; expected resource.")
        else:
            value = read_literal(scanner)
        if alias is not None:
            self._labels[alias] = value
        return value

    @staticmethod
    def _begins_resource(ch: Optional[str]) -> bool:
        return ch is not None and (ch == OBJECT_BEGIN or ch in _COLLECTION_BEGINS or ch in LITERAL_READERS)

    def _parse_object(self, label: Optional[Tuple[LabelKind, str]], label_position: Tuple[int, int],
                      allow_description: bool) -> Any:
        scanner = self._scanner
        scanner.check(OBJECT_BEGIN)
        type_tag = None
        ch = scanner.peek()
        if ch == LABEL_DELIMITER or (ch is not None and is_name_token_begin(ch)):
            type_tag = self._parse_tag_reference()
        alias = None
        if label is None:
            tag = generate_blank_tag()
        else:
            kind, text = label
            if kind is LabelKind.TAG:
                tag = text
            elif kind is LabelKind.ID:
                if type_tag is None:
                    raise ParseError(f"ID label |\"{text}\"| requires an object type.",
                                     *label_position, scanner.source)
                tag = None
            else:
                alias = text
                self._check_new_alias(alias, label_position)
                tag = generate_blank_tag(alias)
        try:
            if tag is None:
                tag = tag_for_instance(type_tag, label[1])
            resource = self.processor.declare_resource(tag, type_tag)
        except ValueError as e:
            raise ParseError(str(e), *label_position, scanner.source) from e
        if alias is not None:
            self._labels[alias] = resource
            self._forward_aliases.pop(alias, None)
        if allow_description and self._skip_filler() == DESCRIPTION_BEGIN:
            self._parse_description(resource)
        return resource

    def _parse_description(self, resource: Any) -> None:
        scanner = self._scanner
        scanner.check(DESCRIPTION_BEGIN)

        def parse_property():
            position = (scanner.line, scanner.column)
            property_tag = self._parse_tag_reference()
            self._skip_filler()
            scanner.check(PROPERTY_VALUE_DELIMITER)
            self._skip_filler()
            value = self._parse_resource()
            try:
                self.processor.process_statement(resource, property_tag, value)
            except PropertyCardinalityError as e:
                raise ParseError(str(e), *position, scanner.source) from e

        self._parse_sequence(DESCRIPTION_END, parse_property)
        scanner.check(DESCRIPTION_END)

    def _parse_list(self, alias: Optional[str]) -> List[Any]:
        scanner = self._scanner
        scanner.check(LIST_BEGIN)
        items: List[Any] = []
        if alias is not None:
            self._labels[alias] = items
        self._parse_sequence(LIST_END, lambda: items.append(self._parse_resource()))
        scanner.check(LIST_END)
        return items

    def _parse_map(self, alias: Optional[str]) -> Dict[Any, Any]:
        scanner = self._scanner
        scanner.check(MAP_BEGIN)
        entries: Dict[Any, Any] = {}
        if alias is not None:
            self._labels[alias] = entries

        def parse_entry():
            position = (scanner.line, scanner.column)
            if scanner.confirm(MAP_KEY_DELIMITER):
                self._skip_filler()
                key = self._parse_resource()
                self._skip_filler()
                scanner.check(MAP_KEY_DELIMITER)
            else:
                key = self._parse_resource(allow_description=False)
            self._skip_filler()
            scanner.check(ENTRY_KEY_VALUE_DELIMITER)
            self._skip_filler()
            value = self._parse_resource()
            try:
                if key in entries:
                    raise ParseError(f"Duplicate map key {key!r}.", *position, scanner.source)
                entries[key] = value
            except TypeError as e:
                raise ParseError(f"Map key is not hashable: {e}", *position, scanner.source) from e

        self._parse_sequence(MAP_END, parse_entry)
        scanner.check(MAP_END)
        return entries

    def _parse_set(self) -> frozenset:
        """Parse a set; the result is frozen so that it can be a map key or set member."""
        scanner = self._scanner
        scanner.check(SET_BEGIN)
        members: set = set()

        def parse_member():
            position = (scanner.line, scanner.column)
            member = self._parse_resource()
            try:
                members.add(member)
            except TypeError as e:
                raise ParseError(f"Set member is not hashable: {e}", *position, scanner.source) from e

        self._parse_sequence(SET_END, parse_member)
        scanner.check(SET_END)
        return frozenset(members)

    def _parse_sequence(self, sequence_end: str, parse_item: Callable[[], None]) -> None:
        """
        Parse items up to (not including) the sequence end.

        Items are separated by a comma, line breaks, or both. A trailing
        separator and an empty sequence are allowed.
        """
        ch = self._skip_line_breaks()
        while ch != sequence_end:
            parse_item()
            if self._skip_sequence_delimiters() is None:
                break
            ch = self._scanner.peek()

    # -------------------------------------------------------------------------
    # Labels and references
    # -------------------------------------------------------------------------

    def _parse_label(self) -> Tuple[LabelKind, str]:
        scanner = self._scanner
        scanner.check(LABEL_DELIMITER)
        ch = scanner.peek()
        if ch == IRI_BEGIN:
            label = (LabelKind.TAG, read_iri(scanner).value)
        elif ch == STRING_DELIMITER:
            id = read_string(scanner)
            if not id:
                raise scanner.error("ID labels must not be empty.")
            label = (LabelKind.ID, id)
        else:
            label = (LabelKind.ALIAS, self._read_name_token())
        scanner.check(LABEL_DELIMITER)
        return label

    def _read_name_token(self) -> str:
        scanner = self._scanner
        ch = scanner.read()
        if not is_name_token_begin(ch):
            raise scanner.unexpected(ch, "name token")
        chars = [ch]
        while (ch := scanner.peek()) is not None and is_name_token_char(ch):
            chars.append(scanner.read())
        return "".join(chars)

    def _read_handle(self) -> str:
        scanner = self._scanner
        chars = [self._read_name_token()]
        while (ch := scanner.peek()) is not None and (is_name_token_char(ch) or ch in _HANDLE_PUNCTUATION):
            chars.append(scanner.read())
        return "".join(chars)

    def _parse_tag_reference(self) -> str:
        """Parse a type or property reference: a handle or a `|<tag>|` label."""
        scanner = self._scanner
        line, column = scanner.line, scanner.column
        if scanner.peek() == LABEL_DELIMITER:
            kind, text = self._parse_label()
            if kind is not LabelKind.TAG:
                raise ParseError(f"Expected a tag label, found a {kind.value} label.", line, column, scanner.source)
            return text
        handle = self._read_handle()
        try:
            return tag_from_handle(handle, self.namespaces)
        except HandleError as e:
            raise ParseError(str(e), line, column, scanner.source) from e

    def _check_new_alias(self, alias: str, position: Tuple[int, int]) -> None:
        if alias in self._labels:
            raise ParseError(f"Label |{alias}| is already defined.", *position, self._scanner.source)

    def _resolve_reference(self, label: Tuple[LabelKind, str], position: Tuple[int, int]) -> Any:
        kind, text = label
        scanner = self._scanner
        if kind is LabelKind.TAG:
            return self.processor.declare_resource(text)
        if kind is LabelKind.ID:
            raise ParseError(f"ID label |\"{text}\"| requires an object type.", *position, scanner.source)
        if text in self._labels:
            return self._labels[text]
        self._forward_aliases.setdefault(text, position)
        return self.processor.reference_resource(generate_blank_tag(text))

    # -------------------------------------------------------------------------
    # Filler
    # -------------------------------------------------------------------------

    def _skip_filler(self) -> Optional[str]:
        """Skip whitespace and comments, but not line breaks; return the next character."""
        scanner = self._scanner
        while True:
            ch = scanner.peek()
            if is_whitespace(ch):
                scanner.skip()
            elif ch == LINE_COMMENT_BEGIN:
                while (ch := scanner.peek()) is not None and not is_eol(ch):
                    scanner.skip()
            else:
                return ch

    def _skip_line_breaks(self) -> Optional[str]:
        """Skip whitespace, comments and line breaks; return the next character."""
        while is_eol(ch := self._skip_filler()):
            self._scanner.skip()
        return ch

    def _skip_sequence_delimiters(self) -> Optional[bool]:
        """
        Skip the separator after a sequence item.

        Returns:
            None if there was no separator, otherwise whether a comma was found
        """
        ch = self._skip_filler()
        if ch != SEQUENCE_DELIMITER and not is_eol(ch):
            return None
        self._skip_line_breaks()
        found_comma = self._scanner.confirm(SEQUENCE_DELIMITER)
        if found_comma:
            self._skip_line_breaks()
        return found_comma


class SurfSerializer:
    """
    Serializer for SURF documents.

    A serializer is single-use: it tracks indentation, generated aliases and
    which shared resources have already been written for one document.
    """

    def __init__(self, config: Optional[SurfConfig] = None):
        self.config = config if config is not None else SurfConfig()
        self._aliases_by_namespace = self.config.aliases_by_namespace
        self._indent_level = 0
        self._seen: Dict[int, Any] = {}
        self._generated_aliases: Dict[int, str] = {}
        self._written: set = set()
        self._written_tags: set = set()
        self._out: Optional[IO[str]] = None
        self._used = False

    def serialize(self, value: Any) -> str:
        """
        Serialize a value, normally a root resource, to SURF text.

        Raises:
            ValueError: if a value cannot be represented
            TypeError: if a value is of an unsupported type
            StateError: if this serializer has already been used
        """
        out = io.StringIO()
        self.write(value, out)
        return out.getvalue()

    def write(self, value: Any, out: IO[str]) -> None:
        """Serialize a value to a text sink."""
        if self._used:
            raise StateError("A SurfSerializer can only serialize one document.")
        self._used = True
        self._discover_references(value)
        self._out = out
        self._write_resource(value)
        if self.config.formatted:
            out.write(self.config.line_separator)

    def _discover_references(self, root: Any) -> None:
        """Find anonymous resources and collections reached more than once."""
        stack = [root]
        visited_tags = set()
        while stack:
            value = stack.pop()
            kind = value_kind(value)
            if kind is ValueKind.RESOURCE:
                if value.tag is not None:
                    if value.tag in visited_tags:
                        continue
                    visited_tags.add(value.tag)
                elif self._mark_seen(value):
                    continue
                children = [v for tag in value.property_tags() for v in self._property_values(value, tag)]
            elif kind is ValueKind.LIST or kind is ValueKind.SET:
                if self._mark_seen(value):
                    continue
                children = list(value)
            elif kind is ValueKind.MAP:
                if self._mark_seen(value):
                    continue
                children = [item for entry in value.items() for item in entry]
            else:
                continue
            stack.extend(reversed(children))
        if self._generated_aliases:
            logger.debug(f"Generated {len(self._generated_aliases)} aliases for shared resources")

    def _mark_seen(self, value: Any) -> bool:
        """Record a compound value; return True if it was already seen."""
        key = id(value)
        if key in self._seen:
            if key not in self._generated_aliases:
                self._generated_aliases[key] = f"resource{len(self._generated_aliases) + 1}"
            return True
        self._seen[key] = value
        return False

    @staticmethod
    def _property_values(resource: Any, property_tag: str) -> List[Any]:
        if hasattr(resource, "get_property_values"):
            return resource.get_property_values(property_tag)
        return [resource.get_property_value(property_tag)]

    # -------------------------------------------------------------------------
    # Writing
    # -------------------------------------------------------------------------

    def _write_resource(self, value: Any, allow_description: bool = True) -> None:
        out = self._out
        kind = value_kind(value)
        alias = self._generated_aliases.get(id(value))
        if alias is not None:
            out.write(f"{LABEL_DELIMITER}{alias}{LABEL_DELIMITER}")
            if id(value) in self._written:
                return
            self._written.add(id(value))
        if kind is ValueKind.RESOURCE:
            self._write_object(value, allow_description)
        elif kind is ValueKind.LIST:
            out.write(LIST_BEGIN)
            self._write_sequence(value, self._write_resource)
            out.write(LIST_END)
        elif kind is ValueKind.MAP:
            out.write(MAP_BEGIN)
            self._write_sequence(list(value.items()), self._write_map_entry)
            out.write(MAP_END)
        elif kind is ValueKind.SET:
            out.write(SET_BEGIN)
            self._write_sequence(list(value), self._write_resource)
            out.write(SET_END)
        else:
            write_literal(out, value)

    def _write_object(self, resource: Any, allow_description: bool) -> None:
        out = self._out
        tag = resource.tag
        type_tag = resource.type_tag
        if tag is not None:
            id = id_of(tag) if type_tag is not None and type_tag_of(tag) == type_tag else None
            if id is not None and tag_for_instance(type_tag, id) != tag:
                id = None
            out.write(LABEL_DELIMITER)
            if id is not None:
                write_string(out, id)
            else:
                write_iri(out, Iri(tag))
            out.write(LABEL_DELIMITER)
            if tag in self._written_tags:
                if id is not None:
                    out.write(OBJECT_BEGIN)
                    self._write_tag_reference(type_tag)
                return
            self._written_tags.add(tag)
        out.write(OBJECT_BEGIN)
        if type_tag is not None:
            self._write_tag_reference(type_tag)
        if allow_description and resource.property_tags():
            self._write_description(resource)

    def _write_description(self, resource: Any) -> None:
        out = self._out
        assignment = f" {PROPERTY_VALUE_DELIMITER} " if self.config.formatted else PROPERTY_VALUE_DELIMITER
        entries = [
            (property_tag, value)
            for property_tag in resource.property_tags()
            for value in self._property_values(resource, property_tag)
        ]

        def write_property(entry):
            property_tag, value = entry
            self._write_tag_reference(property_tag)
            out.write(assignment)
            self._write_resource(value)

        out.write(DESCRIPTION_BEGIN)
        self._write_sequence(entries, write_property)
        out.write(DESCRIPTION_END)

    def _write_map_entry(self, entry: Tuple[Any, Any]) -> None:
        out = self._out
        key, value = entry
        if value_kind(key) is ValueKind.RESOURCE and key.property_tags():
            out.write(MAP_KEY_DELIMITER)
            self._write_resource(key)
            out.write(MAP_KEY_DELIMITER)
        else:
            self._write_resource(key, allow_description=False)
        out.write(ENTRY_KEY_VALUE_DELIMITER)
        if self.config.formatted:
            out.write(" ")
        self._write_resource(value)

    def _write_tag_reference(self, tag: str) -> None:
        handle = handle_from_tag(tag, self._aliases_by_namespace)
        if handle is not None:
            self._out.write(handle)
        else:
            self._out.write(LABEL_DELIMITER)
            write_iri(self._out, Iri(tag))
            self._out.write(LABEL_DELIMITER)

    def _write_sequence(self, items: Sequence[Any], write_item: Callable[[Any], None]) -> None:
        if not items:
            return
        out = self._out
        config = self.config
        if config.formatted:
            out.write(config.line_separator)
            self._indent_level += 1
        for index, item in enumerate(items):
            if config.formatted:
                out.write(config.indent * self._indent_level)
            write_item(item)
            has_next = index < len(items) - 1
            if has_next and (config.sequence_separator_required or not config.formatted):
                out.write(SEQUENCE_DELIMITER)
            if config.formatted:
                out.write(config.line_separator)
        if config.formatted:
            self._indent_level -= 1
            out.write(config.indent * self._indent_level)


def parse_surf(
    source: Source,
    namespaces: Optional[Mapping[str, str]] = None,
    processor: Optional[UrfProcessor] = None,
) -> Any:
    """
    Parse SURF content.

    Args:
        source: SURF content as a string, bytes, file path or stream
        namespaces: Namespace IRIs keyed by handle alias
        processor: Graph processor; a SimpleGraphProcessor by default

    Returns:
        The root resource, or None for an empty document
    """
    parser = SurfParser(processor, namespaces)
    return parser.parse(source)


def serialize_surf(value: Any, config: Optional[SurfConfig] = None, **options: Any) -> str:
    """
    Serialize a value to SURF.

    Args:
        value: The root resource (or any other value)
        config: Serializer configuration
        **options: Overrides for individual SurfConfig fields, e.g. formatted=True

    Returns:
        SURF text
    """
    config = config if config is not None else SurfConfig()
    if options:
        config = replace(config, **options)
    serializer = SurfSerializer(config)
    return serializer.serialize(value)
