"""Tests for the Validation Engine and Conversion Engine."""

import json
from pathlib import Path

import pytest

import structgen
from structgen.engine.conversion_engine import (
    ConversionEngine,
    ConversionError,
    ConversionResult,
)
from structgen.engine.validation_engine import ValidationEngine, ValidationResult
from structgen.errors import ParseError, ValidationError
from structgen.options.base import ConversionOptions, Dialect, TagStyle
from structgen.schemas.base import CanonicalType, InputFormat
from structgen.schemas.value_tree import JsonParser
from structgen.render.renderer import StructRenderer

SCHEMAS_DIR = Path(__file__).parent.parent / "examples" / "schemas"

ALL_FORMATS = ["json", "yaml", "sql", "proto", "xml", "csv"]


@pytest.fixture
def validation_engine():
    return ValidationEngine()


@pytest.fixture
def engine():
    return ConversionEngine()


@pytest.fixture
def sql_options():
    return ConversionOptions(dialect=Dialect.MYSQL, tag_style=TagStyle.PLAIN)


# =============================================================================
# Validation Engine Tests
# =============================================================================

class TestValidationEngine:
    """Tests for ValidationEngine."""

    @pytest.mark.parametrize("input_format", ALL_FORMATS + ["toml"])
    @pytest.mark.parametrize("content", ["", "   ", "\n\t\n"])
    def test_empty_input_invalid(self, validation_engine, input_format, content):
        """Test that empty input is invalid for every format."""
        result = validation_engine.validate(content, input_format)
        assert result.is_valid is False
        assert result.error

    def test_unsupported_format(self, validation_engine):
        result = validation_engine.validate("{}", "toml")
        assert result.is_valid is False
        assert "Unsupported format" in result.error

    def test_enum_format_accepted(self, validation_engine):
        assert validation_engine.validate("{}", InputFormat.JSON).is_valid is True

    def test_json(self, validation_engine):
        assert validation_engine.validate('{"a": 1}', "json").is_valid is True
        result = validation_engine.validate('{"a": }', "json")
        assert result.is_valid is False
        assert result.line == 1
        assert result.column == 7

    def test_yaml(self, validation_engine):
        assert validation_engine.validate("a: 1\nb: [1, 2]", "yaml").is_valid is True
        result = validation_engine.validate("a: [1, 2\nb: 3", "yaml")
        assert result.is_valid is False
        assert result.line is not None

    @pytest.mark.parametrize("content", [
        "CREATE TABLE t (id INT)",
        "create   table t (id int)",
        "\n  Create\nTable t (id int)",
        "-- users\nCREATE TABLE t (id INT)",
        "CREATE TEMPORARY TABLE t (id INT)",
    ])
    def test_sql_valid(self, validation_engine, content):
        assert validation_engine.validate(content, "sql").is_valid is True

    @pytest.mark.parametrize("content", [
        "SELECT * FROM t",
        "CREATE INDEX i ON t (id)",
        "CREATE TABLE t (PRIMARY KEY (id), UNIQUE (id))",
        "CREATE TABLE (id INT)",
        "CREATE TABLE t (id INT",
    ])
    def test_sql_invalid(self, validation_engine, content):
        assert validation_engine.validate(content, "sql").is_valid is False

    def test_sql_error_position(self, validation_engine):
        result = validation_engine.validate("CREATE TABLE t (\n  id INT", "sql")
        assert result.line == 1
        assert result.column == 16

    def test_proto(self, validation_engine):
        assert validation_engine.validate("message A {}", "proto").is_valid is True
        assert validation_engine.validate("enum E { A = 0; }", "proto").is_valid is False
        assert validation_engine.validate("messages", "proto").is_valid is False

    @pytest.mark.parametrize("content", [
        "<a><b>1</b></a>",
        '<?xml version="1.0"?>\n<a>\n  <b/>\n  <!-- <c> -->\n</a>',
        "<a><![CDATA[<b>]]></a>",
    ])
    def test_xml_valid(self, validation_engine, content):
        assert validation_engine.validate(content, "xml").is_valid is True

    @pytest.mark.parametrize("content,message", [
        ("a <b></b>", "start"),
        ("<a><b></a></b>", "Mismatched"),
        ("<a><b></b>", "Unclosed"),
        ("<a></a></b>", "Unexpected"),
        ("<!-- nothing -->", "no elements"),
    ])
    def test_xml_invalid(self, validation_engine, content, message):
        result = validation_engine.validate(content, "xml")
        assert result.is_valid is False
        assert message in result.error

    def test_xml_error_line(self, validation_engine):
        result = validation_engine.validate("<a>\n<b>\n</c>\n</a>", "xml")
        assert result.line == 3

    def test_csv(self, validation_engine):
        assert validation_engine.validate("a,b\n1,2", "csv").is_valid is True
        assert validation_engine.validate("a,b\n\n   \n", "csv").is_valid is False


class TestValidationResult:
    """Tests for ValidationResult."""

    def test_to_dict(self):
        assert ValidationResult.ok().to_dict() == {"is_valid": True}
        result = ValidationResult.fail("bad", line=2, column=3)
        assert result.to_dict() == {"is_valid": False, "error": "bad", "line": 2, "column": 3}


# =============================================================================
# Conversion Engine Tests
# =============================================================================

class TestConversionEngine:
    """Tests for ConversionEngine.convert."""

    def test_json_example(self, engine):
        content = (SCHEMAS_DIR / "user.json").read_text()
        output = engine.convert(content, "json")
        assert output == (
            "type AutoGenProfile struct {\n"
            '\tAddress string `json:"address" yaml:"address"`\n'
            '\tPhone string `json:"phone" yaml:"phone"`\n'
            "}\n"
            "\n"
            "type AutoGen struct {\n"
            '\tId int32 `json:"id" yaml:"id"`\n'
            '\tName string `json:"name" yaml:"name"`\n'
            '\tAge int32 `json:"age" yaml:"age"`\n'
            '\tEmail string `json:"email" yaml:"email"`\n'
            '\tIsActive bool `json:"is_active" yaml:"is_active"`\n'
            '\tCreatedAt string `json:"created_at" yaml:"created_at"`\n'
            '\tTags []string `json:"tags" yaml:"tags"`\n'
            '\tProfile AutoGenProfile `json:"profile" yaml:"profile"`\n'
            "}\n"
        )

    def test_json_keeps_key_case(self, engine):
        output = engine.convert('{"firstName": "a"}', "json")
        assert '\tFirstName string `json:"firstName" yaml:"firstName"`' in output

    def test_json_field_count_matches_keys(self, engine):
        data = {"z": 1, "y": "two", "x": [1.5], "w": None, "v": True}
        structs = engine.build_structs(json.dumps(data), "json")
        assert [f.source_name for f in structs[0].fields] == list(data)

    def test_int32_boundary(self, engine):
        output = engine.convert('{"small": 2147483647, "big": 2147483648}', "json")
        assert "\tSmall int32 " in output
        assert "\tBig int64 " in output

    def test_null_renders_pointer(self, engine):
        output = engine.convert('{"x": null}', "json")
        assert "\tX *interface{} " in output

    def test_yaml_timestamp_import(self, engine):
        content = (SCHEMAS_DIR / "user.yaml").read_text()
        output = engine.convert(content, "yaml")
        assert output.startswith('import (\n\t"time"\n)\n\n')
        assert "\tCreatedAt time.Time " in output

    def test_sql_example(self, engine, sql_options):
        content = (SCHEMAS_DIR / "users.sql").read_text()
        output = engine.convert(content, "sql", sql_options)
        assert output.startswith('import (\n\t"encoding/json"\n\t"time"\n)\n\n')
        assert "\tId uint64 `json:\"id\" yaml:\"id\"`" in output
        assert "\tUsername string `json:\"username\" yaml:\"username\" comment:\"Login name\"`" in output
        assert "\tEmail *string " in output
        assert "\tProfileData *json.RawMessage " in output
        assert output.index("type Users struct") < output.index("type Orders struct")

    def test_sql_unsigned(self, engine, sql_options):
        unsigned = engine.build_structs("CREATE TABLE t (n INT UNSIGNED)", "sql", sql_options)
        signed = engine.build_structs("CREATE TABLE t (n INT)", "sql", sql_options)
        assert unsigned[0].fields[0].descriptor.base_type == CanonicalType.UINT32
        assert signed[0].fields[0].descriptor.base_type == CanonicalType.INT32

    def test_sql_lowercases_tags(self, engine, sql_options):
        output = engine.convert("CREATE TABLE T (UserID INT NOT NULL)", "sql", sql_options)
        assert output == 'type T struct {\n\tUserid int32 `json:"userid" yaml:"userid"`\n}\n'

    def test_sql_gorm(self, engine):
        options = ConversionOptions(tag_style=TagStyle.GORM)
        ddl = "CREATE TABLE t (status VARCHAR(8) NOT NULL DEFAULT 'new' COMMENT 'State')"
        output = engine.convert(ddl, "sql", options)
        assert "gorm:\"column:status;comment:'State';default:new\"" in output

    def test_sql_pointer_flag(self, engine):
        options = ConversionOptions(use_pointer_for_nullable=True)
        output = engine.convert("CREATE TABLE t (id INT NOT NULL)", "sql", options)
        assert "\tId *int32 " in output

    def test_sql_postgres(self, engine):
        options = ConversionOptions(dialect=Dialect.POSTGRES)
        output = engine.convert("CREATE TABLE t (data JSONB NOT NULL, raw BYTEA NOT NULL)", "sql", options)
        assert "\tData json.RawMessage " in output
        assert "\tRaw []byte " in output

    def test_sql_requires_options(self, engine):
        with pytest.raises(ValidationError, match="requires options"):
            engine.convert("CREATE TABLE t (id INT)", "sql")

    def test_proto_example(self, engine):
        content = (SCHEMAS_DIR / "user.proto").read_text()
        output = engine.convert(content, "proto")
        assert output.startswith('import (\n\t"time"\n)\n\ntype User struct {\n')
        assert '\tTags []string `json:"tags"`' in output
        assert '\tProfile Profile `json:"profile"`' in output
        assert '\tPhone *string `json:"phone"`' in output

    @pytest.mark.parametrize("content", [
        "message A {\n  int32 id = 1; /* primary id */\n  string name = 2;\n}\n",
        "message A {\n  int32 id = 1;\n  string name = 2; }\n",
        "message A { int32 id = 1; string name = 2; }\n",
    ])
    def test_proto_field_layouts(self, engine, content):
        assert engine.convert(content, "proto") == (
            "type A struct {\n"
            '\tId int32 `json:"id"`\n'
            '\tName string `json:"name"`\n'
            "}\n"
        )

    def test_xml_tags(self, engine):
        output = engine.convert("<root><tag>a</tag><tag>a</tag><tag2>b</tag2></root>", "xml")
        assert output == (
            "type Root struct {\n"
            '\tTag []string `xml:"tag" json:"tag"`\n'
            '\tTag2 string `xml:"tag2" json:"tag2"`\n'
            "}\n"
        )

    def test_csv(self, engine):
        output = engine.convert("id,name\n1,alice\n", "csv")
        assert output == (
            "type AutoGen struct {\n"
            '\tId int32 `json:"id"`\n'
            '\tName string `json:"name"`\n'
            "}\n"
        )

    def test_csv_header_with_comma(self, engine):
        output = engine.convert('"b,c",d\nx,1\n', "csv")
        assert '\tBC string `json:"b_c"`' in output

    def test_root_name(self, engine):
        output = engine.convert("id\n1", "csv", ConversionOptions(root_name="Row"))
        assert output.startswith("type Row struct {")

    def test_struct_names_unique(self, engine, sql_options):
        """Test that a table named like a nested struct gets a suffix."""
        structs = engine.build_structs(
            "CREATE TABLE users (id INT); CREATE TABLE Users (id INT)", "sql", sql_options
        )
        assert [s.name for s in structs] == ["Users", "Users2"]

    @pytest.mark.parametrize("input_format,content", [
        ("json", '{"a": {"b": [1, 2]}, "c": null}'),
        ("yaml", "a: 1\nb:\n  c: 2020-01-01\n"),
        ("proto", "message A {\n  repeated int32 x = 1;\n}"),
        ("xml", "<a><b>1</b><b>2</b></a>"),
        ("csv", "a,b\n1,x"),
    ])
    def test_deterministic(self, engine, input_format, content):
        """Test that converting the same input twice gives identical output."""
        first = engine.convert(content, input_format)
        second = engine.convert(content, input_format)
        assert first == second

    def test_deterministic_sql(self, engine, sql_options):
        content = (SCHEMAS_DIR / "users.sql").read_text()
        assert engine.convert(content, "sql", sql_options) == engine.convert(content, "sql", sql_options)


class TestConversionErrors:
    """Tests for failure reporting."""

    def test_invalid_input_raises_validation_error(self, engine):
        with pytest.raises(ValidationError) as exc_info:
            engine.convert('{"a": }', "json")
        assert exc_info.value.line == 1

    def test_unsupported_format(self, engine):
        with pytest.raises(ValidationError, match="Unsupported format"):
            engine.convert("x", "toml")

    def test_parse_error(self, engine):
        with pytest.raises(ParseError):
            engine.convert("42", "json")

    def test_xml_without_elements(self, engine):
        with pytest.raises(ValidationError):
            engine.convert("<!-- only a comment -->", "xml")

    def test_errors_are_value_errors(self, engine):
        with pytest.raises(ValueError):
            engine.convert("", "csv")

    def test_try_convert_success(self, engine):
        result = engine.try_convert("id\n1", "csv")
        assert isinstance(result, ConversionResult)
        assert result.success is True
        assert result.error is None
        assert "type AutoGen struct" in result.output

    def test_try_convert_failure(self, engine):
        result = engine.try_convert("CREATE TABLE t (id INT", "sql", ConversionOptions())
        assert result.success is False
        assert result.output == ""
        assert result.error.line == 1
        assert result.to_dict()["error"]["column"] == 16

    def test_error_str_includes_position(self):
        assert str(ParseError("boom")) == "boom"
        assert str(ParseError("boom", line=2)) == "boom (line 2)"
        assert str(ValidationError("boom", line=2, column=5)) == "boom (line 2, column 5)"

    def test_conversion_error_from_exception(self):
        error = ConversionError.from_exception(ParseError("boom", line=3))
        assert error.to_dict() == {"message": "boom", "line": 3}


# =============================================================================
# Cycle Tests
# =============================================================================

class TestCycles:
    """Tests for cyclic value trees."""

    def test_in_memory_cycle_renders(self):
        data = {"name": "n", "children": []}
        data["children"].append(data)
        data["self"] = data

        structs = JsonParser("").describe(data)
        output = StructRenderer().render(structs)
        assert "\tSelf *interface{}" in output
        assert "\tChildren []*interface{}" in output
        assert output.count("type ") == 1

    def test_yaml_anchor_cycle(self, engine):
        output = engine.convert("node: &n\n  name: x\n  self: *n\n", "yaml")
        assert "type AutoGenNode struct {" in output
        assert "\tSelf *interface{} " in output


# =============================================================================
# Package Entry Points
# =============================================================================

class TestPackageEntryPoints:
    """Tests for the module-level validate/convert/try_convert."""

    def test_validate(self):
        assert structgen.validate("a,b\n1,2", "csv").is_valid is True
        assert structgen.validate("", "json").is_valid is False

    def test_convert(self):
        assert structgen.convert("a\n1", "csv").startswith("type AutoGen struct")

    def test_try_convert(self):
        assert structgen.try_convert("", "json").success is False
