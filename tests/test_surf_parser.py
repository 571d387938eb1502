"""Tests for the SURF parser."""
import io
from datetime import date
from decimal import Decimal

import pytest

from surfgraph.errors import ParseError, StateError
from surfgraph.formats.surf import SurfParser, parse_surf
from surfgraph.graph import Resource, SimpleGraphProcessor
from surfgraph.model import Character, EmailAddress, Iri
from surfgraph.tags import tag_for_instance, tag_from_handle

NAMESPACES = {"ex": "https://example.com/"}


def prop(resource, handle, namespaces=None):
    return resource.find_property_value_by_handle(handle, namespaces)


class RecordingProcessor(SimpleGraphProcessor):
    def __init__(self):
        super().__init__()
        self.statements = []

    def process_statement(self, subject, property_tag, value):
        self.statements.append((subject, property_tag, value))
        super().process_statement(subject, property_tag, value)


# ========== Object Tests ==========

class TestObjects:
    def test_anonymous_object(self):
        root = parse_surf("*")
        assert isinstance(root, Resource)
        assert root.tag is None
        assert root.type_tag is None
        assert not root.has_properties()

    def test_typed_object(self):
        root = parse_surf("*FooBar")
        assert root.type_tag == tag_from_handle("FooBar")
        assert root.type_handle() == "FooBar"

    def test_single_property(self):
        root = parse_surf('*:one="one";')
        assert root.property_tags() == [tag_from_handle("one")]
        assert prop(root, "one") == "one"

    def test_typed_object_with_properties(self):
        root = parse_surf('''
            *Person:
              name = "Jane Doe"
              born = @1980-03-04
              email = ^jdoe@example.com
            ;
        ''')
        assert root.type_handle() == "Person"
        assert prop(root, "name") == "Jane Doe"
        assert prop(root, "born") == date(1980, 3, 4)
        assert prop(root, "email") == EmailAddress("jdoe", "example.com")

    def test_empty_description(self):
        assert not parse_surf("*Foo:;").has_properties()
        assert not parse_surf("*Foo:\n\n;").has_properties()

    def test_nested_objects(self):
        root = parse_surf('*:child=*Child:name="c";;')
        child = prop(root, "child")
        assert child.type_handle() == "Child"
        assert prop(child, "name") == "c"

    def test_namespaced_handles(self):
        root = parse_surf('*ex/Person:ex/name="x";', namespaces=NAMESPACES)
        assert root.type_tag == "https://example.com/Person"
        assert root.get_property_value("https://example.com/name") == "x"

    def test_unregistered_alias(self):
        with pytest.raises(ParseError):
            parse_surf('*zz/Person')

    def test_tag_label_type_and_property(self):
        root = parse_surf('*|<https://example.com/Person>|:|<https://example.com/p>|=1;')
        assert root.type_tag == "https://example.com/Person"
        assert root.get_property_value("https://example.com/p") == 1

    def test_plural_property(self):
        root = parse_surf('*:friends+="a",friends+="b";')
        assert prop(root, "friends+") == ["a", "b"]

    def test_duplicate_singular_property(self):
        with pytest.raises(ParseError) as exc_info:
            parse_surf('*:a=1,a=2;')
        assert exc_info.value.line == 1
        assert exc_info.value.column == 7


# ========== Literal Tests ==========

class TestLiterals:
    def test_literal_values(self):
        root = parse_surf(r'''*:
            b = true
            c = 'x'
            d = $1.50
            i = 42
            r = 1.5
            s = "a\tb"
            iri = <https://example.com/>
            bin = %SGVsbG8
        ;''')
        assert prop(root, "b") is True
        assert prop(root, "c") == Character("x")
        assert prop(root, "d") == Decimal("1.50")
        assert prop(root, "i") == 42
        assert prop(root, "r") == 1.5
        assert prop(root, "s") == "a\tb"
        assert prop(root, "iri") == Iri("https://example.com/")
        assert prop(root, "bin") == b"Hello"

    def test_literal_root(self):
        assert parse_surf('"hello"') == "hello"


# ========== Collection Tests ==========

class TestCollections:
    @pytest.mark.parametrize("text", [
        "[1,2,3]",
        "[1, 2, 3]",
        "[\n1\n2\n3\n]",
        "[1,\n2,\n3,\n]",
        "[1\n,2\n,3]",
        "[ 1 ! one\n 2 ! two\n 3 ]",
    ])
    def test_list_separators(self, text):
        assert parse_surf(text) == [1, 2, 3]

    def test_empty_collections(self):
        assert parse_surf("[]") == []
        assert parse_surf("{}") == {}
        assert parse_surf("()") == set()

    def test_double_comma(self):
        with pytest.raises(ParseError):
            parse_surf("[1,,2]")

    def test_unterminated_list(self):
        with pytest.raises(ParseError):
            parse_surf("[1, 2")

    def test_map(self):
        assert parse_surf('{"a": 1, 2: "b", true: []}') == {"a": 1, 2: "b", True: []}

    def test_map_object_keys(self):
        value = parse_surf('{*Key: 1, \\*Key:x=2;\\: 3}')
        keys = list(value)
        assert keys[0].type_handle() == "Key"
        assert not keys[0].has_properties()
        assert prop(keys[1], "x") == 2
        assert list(value.values()) == [1, 3]

    def test_duplicate_map_key(self):
        with pytest.raises(ParseError):
            parse_surf('{"a": 1, "a": 2}')

    def test_unhashable_map_key(self):
        with pytest.raises(ParseError):
            parse_surf('{[1]: 2}')

    def test_set(self):
        assert parse_surf('(1, "a", 1)') == {1, "a"}

    def test_nested(self):
        assert parse_surf('[[1], {"k": (2)}]') == [[1], {"k": {2}}]


# ========== Label Tests ==========

class TestLabels:
    def test_alias_back_reference(self):
        root = parse_surf('''*:
            friend = |bob|*Person:name="Bob";
            boss = |bob|
        ;''')
        assert prop(root, "boss") is prop(root, "friend")
        assert prop(root, "boss").type_handle() == "Person"
        assert prop(root, "boss").tag is None

    def test_alias_forward_reference(self):
        root = parse_surf('''*:
            boss = |bob|
            friend = |bob|*Person:name="Bob";
        ;''')
        assert prop(root, "boss") is prop(root, "friend")
        assert prop(prop(root, "boss"), "name") == "Bob"

    def test_unresolved_alias(self):
        with pytest.raises(ParseError, match="bob") as exc_info:
            parse_surf('*:\n  boss = |bob|\n;')
        assert exc_info.value.line == 2
        assert exc_info.value.column == 10

    def test_alias_defined_twice(self):
        with pytest.raises(ParseError):
            parse_surf('[|a|*, |a|*]')

    def test_forward_alias_defined_as_literal(self):
        with pytest.raises(ParseError):
            parse_surf('[|a|, |a|"x"]')

    def test_alias_on_literal_and_collection(self):
        value = parse_surf('[|s|"hi", |s|, |l|[1], |l|]')
        assert value[0] == value[1] == "hi"
        assert value[2] is value[3]

    def test_self_reference(self):
        root = parse_surf('|me|*:self=|me|;')
        assert prop(root, "self") is root

    def test_tag_label(self):
        root = parse_surf('''*:
            a = |<https://example.com/jdoe>|*Person:name="Jane";
            b = |<https://example.com/jdoe>|
        ;''')
        assert prop(root, "a") is prop(root, "b")
        assert prop(root, "a").tag == "https://example.com/jdoe"

    def test_id_label(self):
        root = parse_surf('[|"jdoe"|*Person:name="Jane";, |"jdoe"|*Person]')
        assert root[0] is root[1]
        assert root[0].tag == tag_for_instance(tag_from_handle("Person"), "jdoe")

    def test_id_label_requires_type(self):
        with pytest.raises(ParseError):
            parse_surf('|"jdoe"|*')

    def test_id_label_reference_requires_type(self):
        with pytest.raises(ParseError):
            parse_surf('[|"jdoe"|]')

    def test_label_on_literal_must_be_alias(self):
        with pytest.raises(ParseError):
            parse_surf('|<https://example.com/x>|"text"')

    def test_conflicting_types(self):
        with pytest.raises(ParseError):
            parse_surf('[|<https://example.com/x>|*A, |<https://example.com/x>|*B]')


# ========== Document Tests ==========

class TestDocuments:
    def test_empty_document(self):
        assert parse_surf("") is None
        assert parse_surf("  ! just a comment\n\n") is None

    def test_comments(self):
        root = parse_surf('! header\n*Foo: ! open\n  a = 1 ! one\n; ! done\n')
        assert prop(root, "a") == 1

    def test_content_after_root(self):
        with pytest.raises(ParseError):
            parse_surf("*Foo\n*Bar")

    def test_error_position(self):
        with pytest.raises(ParseError) as exc_info:
            parse_surf("*:\n  a = ?\n;")
        assert (exc_info.value.line, exc_info.value.column) == (2, 7)

    def test_bytes_source(self):
        assert parse_surf('"é"'.encode("utf-8")) == "é"

    def test_binary_stream_source(self):
        assert parse_surf(io.BytesIO(b"[1]")) == [1]

    def test_path_source_named_in_errors(self, tmp_path):
        path = tmp_path / "bad.surf"
        path.write_text("*:a=;", encoding="utf-8")
        with pytest.raises(ParseError) as exc_info:
            parse_surf(path)
        assert exc_info.value.source == str(path)
        assert str(exc_info.value).startswith(str(path))

    def test_parser_is_single_use(self):
        parser = SurfParser()
        parser.parse("*")
        with pytest.raises(StateError):
            parser.parse("*")

    def test_root_reported_to_processor(self):
        processor = SimpleGraphProcessor()
        root = parse_surf("*Foo", processor=processor)
        assert processor.get_result() == [root]

    def test_statements_go_through_processor(self):
        processor = RecordingProcessor()
        root = parse_surf('*:a=1,b=*:c=2;;', processor=processor)
        child = prop(root, "b")
        assert processor.statements == [
            (root, tag_from_handle("a"), 1),
            (child, tag_from_handle("c"), 2),
            (root, tag_from_handle("b"), child),
        ]
