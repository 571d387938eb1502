"""Tests for the CSV importer."""
import io
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from surfgraph.errors import ParseError, StateError
from surfgraph.formats.csv_import import CsvColumn, CsvParser, parse_csv
from surfgraph.graph import SimpleGraphProcessor
from surfgraph.model import EmailAddress, Iri, YearMonth
from surfgraph.tags import INTEGER_TYPE_TAG, tag_for_instance, tag_from_handle

USER = tag_from_handle("User")


def prop(resource, handle):
    return resource.find_property_value_by_handle(handle)


# ========== Header Tests ==========

class TestHeaders:
    @pytest.fixture
    def parser(self):
        return CsvParser(namespaces={"ex": "https://example.com/"})

    def test_plain(self, parser):
        assert parser.parse_header("name") == CsvColumn("name", tag_from_handle("name"))

    def test_id(self, parser):
        column = parser.parse_header("#username")
        assert column.is_id
        assert column.property_tag == tag_from_handle("username")

    def test_typed(self, parser):
        column = parser.parse_header("age:urf-Integer")
        assert column.type_tag == INTEGER_TYPE_TAG
        assert not column.is_id

    def test_typed_id(self, parser):
        column = parser.parse_header("#id:urf-Integer")
        assert column.is_id
        assert column.type_tag == INTEGER_TYPE_TAG

    def test_ignored(self, parser):
        column = parser.parse_header("!notes: anything at all")
        assert column.ignored
        assert column.property_tag is None

    def test_tag_property(self, parser):
        column = parser.parse_header("|<https://example.com/p>|:|<https://example.com/T>|")
        assert column.property_tag == "https://example.com/p"
        assert column.type_tag == "https://example.com/T"

    def test_namespaced(self, parser):
        column = parser.parse_header("ex/title")
        assert column.property_tag == "https://example.com/title"

    def test_plural(self, parser):
        assert parser.parse_header("tags+").property_tag == tag_from_handle("tags+")

    @pytest.mark.parametrize("header", ["", "1abc", "name:", "a b", "zz/name", "ex/a-b", "##id"])
    def test_invalid(self, parser, header):
        with pytest.raises(ParseError) as exc_info:
            parser.parse_header(header, 3)
        assert exc_info.value.line == 1
        assert exc_info.value.column == 3


# ========== Import Tests ==========

class TestImport:
    def test_manager_reference_is_same_instance(self):
        rows = parse_csv(
            "#id,name,manager:User\n"
            "jdoe,Jane Doe,\n"
            "fbloggs,Fred Bloggs,jdoe\n",
            subject_type_tag=USER,
        )
        jane, fred = rows
        assert jane.tag == tag_for_instance(USER, "jdoe")
        assert jane.type_tag == USER
        assert prop(jane, "id") == "jdoe"
        assert prop(jane, "name") == "Jane Doe"
        assert not jane.has_property(tag_from_handle("manager"))
        assert prop(fred, "manager") is jane

    def test_forward_reference_is_same_instance(self):
        rows = parse_csv(
            "#id,manager:User\n"
            "fbloggs,jdoe\n"
            "jdoe,\n",
            subject_type_tag=USER,
        )
        assert prop(rows[0], "manager") is rows[1]

    def test_reference_to_other_type(self):
        processor = SimpleGraphProcessor()
        rows = parse_csv("name,team:Team\nJane,red\n", processor=processor)
        team = prop(rows[0], "team")
        assert team.tag == tag_for_instance(tag_from_handle("Team"), "red")
        assert team.type_handle() == "Team"
        assert team.tag in processor.resources

    def test_typed_literals(self):
        rows = parse_csv(
            "#n:urf-Integer,ok:urf-Boolean,price:urf-Decimal,ratio:urf-Real,born:urf-LocalDate,"
            "seen:urf-Instant,mail:urf-EmailAddress,site:urf-Iri,month:urf-YearMonth\n"
            "1,true,9.99,0.5,1980-03-04,2024-01-31T12:00:00Z,jdoe@example.com,https://example.com/,2024-02\n"
        )
        row = rows[0]
        assert prop(row, "n") == 1
        assert prop(row, "ok") is True
        assert prop(row, "price") == Decimal("9.99")
        assert prop(row, "ratio") == 0.5
        assert prop(row, "born") == date(1980, 3, 4)
        assert prop(row, "seen") == datetime(2024, 1, 31, 12, tzinfo=timezone.utc)
        assert prop(row, "mail") == EmailAddress("jdoe", "example.com")
        assert prop(row, "site") == Iri("https://example.com/")
        assert prop(row, "month") == YearMonth(2024, 2)

    def test_real_accepts_integer_text(self):
        rows = parse_csv("x:urf-Real\n3\n")
        assert prop(rows[0], "x") == 3.0
        assert isinstance(prop(rows[0], "x"), float)

    def test_ignored_and_empty_fields(self):
        rows = parse_csv("name,!notes,age:urf-Integer\nJane,secret,\n")
        row = rows[0]
        assert row.property_tags() == [tag_from_handle("name")]

    def test_no_id_column_gives_blank_subjects(self):
        rows = parse_csv("name\nA\nB\n", subject_type_tag=USER)
        assert [row.tag for row in rows] == [None, None]
        assert rows[0] is not rows[1]
        assert rows[0].type_tag == USER

    def test_id_without_subject_type(self):
        rows = parse_csv("#id\nx\ny\n")
        assert [prop(row, "id") for row in rows] == ["x", "y"]
        assert rows[0].tag is None

    def test_plural_column(self):
        rows = parse_csv("#id,tags+\nx,red\n", subject_type_tag=USER)
        assert prop(rows[0], "tags+") == ["red"]

    def test_header_only(self):
        parser = CsvParser()
        assert parser.parse("#id,name\n", USER) == []
        assert [column.header for column in parser.columns] == ["#id", "name"]

    def test_sources(self, tmp_path):
        path = tmp_path / "users.csv"
        path.write_text("#id,name\njdoe,Jane\n", encoding="utf-8")
        assert prop(parse_csv(path, USER)[0], "name") == "Jane"
        assert prop(parse_csv(b"name\nJane\n")[0], "name") == "Jane"
        assert prop(parse_csv(io.StringIO("name\nJane\n"))[0], "name") == "Jane"
        assert prop(parse_csv(io.BytesIO("name\nJosé\n".encode("utf-8")))[0], "name") == "José"


# ========== Error Tests ==========

class TestErrors:
    def test_columns_before_parse(self):
        with pytest.raises(StateError):
            CsvParser().columns

    def test_single_use(self):
        parser = CsvParser()
        parser.parse("name\nA\n")
        with pytest.raises(StateError):
            parser.parse("name\nA\n")

    def test_two_id_columns(self):
        with pytest.raises(ParseError):
            parse_csv("#a,#b\n1,2\n", USER)

    def test_invalid_typed_value_position(self):
        with pytest.raises(ParseError) as exc_info:
            parse_csv("name,age:urf-Integer\nA,1\nB,old\n")
        assert exc_info.value.line == 3
        assert exc_info.value.column == 2
        assert "age" in exc_info.value.message

    def test_integer_rejects_fraction(self):
        with pytest.raises(ParseError):
            parse_csv("age:urf-Integer\n1.5\n")

    def test_local_date_rejects_date_time(self):
        with pytest.raises(ParseError):
            parse_csv("born:urf-LocalDate\n1980-03-04T00:00:00\n")

    def test_invalid_header_position(self):
        with pytest.raises(ParseError) as exc_info:
            parse_csv("name,1bad\nA,B\n")
        assert exc_info.value.column == 2

    def test_conflicting_subject_type(self):
        processor = SimpleGraphProcessor()
        processor.declare_resource(tag_for_instance(USER, "x"), tag_from_handle("Robot"))
        with pytest.raises(ParseError) as exc_info:
            parse_csv("name,#id\nA,x\n", USER, processor=processor)
        assert exc_info.value.line == 2
        assert exc_info.value.column == 2
