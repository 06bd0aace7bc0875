"""Tests for tag generation and struct rendering.

Tests cover:
- Tag styles (plain, db, gorm, xorm)
- Escaping of comment and default text
- Go type mapping and the pointer rule
- Import collection and struct ordering
"""

import pytest

from structgen.options.base import ConversionOptions, TagStyle
from structgen.render.renderer import GO_TYPES, StructRenderer, go_type
from structgen.render.tags import escape_tag_value, generate_tags, strip_quotes
from structgen.schemas.base import CanonicalType, FieldSpec, StructSpec, TypeDescriptor

C = CanonicalType


def make_field(name, descriptor, nullable=False, tag=None):
    return FieldSpec(
        name=name,
        source_name=name.lower(),
        descriptor=descriptor,
        nullable=nullable,
        tag=tag,
    )


# =============================================================================
# Tag Generator Tests
# =============================================================================

class TestGenerateTags:
    """Tests for generate_tags."""

    def test_plain_lowercases(self):
        assert generate_tags("UserName", ConversionOptions()) == 'json:"username" yaml:"username"'

    def test_plain_with_comment_and_default(self):
        tags = generate_tags("age", ConversionOptions(), comment="Age in years", default_value="0")
        assert tags == 'json:"age" yaml:"age" comment:"Age in years" default:"0"'

    def test_comma_in_name_is_replaced(self):
        tags = generate_tags("b,c", ConversionOptions(tag_style=TagStyle.DB), lowercase=False)
        assert tags == 'json:"b_c" yaml:"b_c" db:"b_c"'

    def test_db(self):
        options = ConversionOptions(tag_style=TagStyle.DB)
        assert generate_tags("ID", options) == 'json:"id" yaml:"id" db:"id"'
        assert generate_tags("n", options, comment="ignored", default_value="'x'") == (
            'json:"n" yaml:"n" db:"n" default:"\'x\'"'
        )

    def test_gorm(self):
        options = ConversionOptions(tag_style=TagStyle.GORM)
        tags = generate_tags("status", options, comment="Account state", default_value="'active'")
        assert tags == (
            'json:"status" yaml:"status" '
            "gorm:\"column:status;comment:'Account state';default:active\""
        )

    def test_gorm_column_only(self):
        options = ConversionOptions(tag_style=TagStyle.GORM)
        assert generate_tags("id", options) == 'json:"id" yaml:"id" gorm:"column:id"'

    def test_xorm(self):
        options = ConversionOptions(tag_style=TagStyle.XORM)
        tags = generate_tags("status", options, comment="Account state", default_value="'active'")
        assert tags == (
            'json:"status" yaml:"status" '
            "xorm:\"'status' comment('Account state') default('active')\""
        )

    def test_xorm_name_only(self):
        options = ConversionOptions(tag_style=TagStyle.XORM)
        assert generate_tags("id", options) == "json:\"id\" yaml:\"id\" xorm:\"'id'\""

    def test_escape_double_quotes_and_backslash(self):
        tags = generate_tags("c", ConversionOptions(), comment='say "hi" \\ bye')
        assert tags == 'json:"c" yaml:"c" comment:"say \\"hi\\" \\\\ bye"'

    def test_escape_single_quote_in_clause(self):
        options = ConversionOptions(tag_style=TagStyle.GORM)
        tags = generate_tags("c", options, comment="it's")
        assert "comment:'it''s'" in tags

    def test_backticks_replaced(self):
        tags = generate_tags("c", ConversionOptions(), comment="use `x`")
        assert "`" not in tags
        assert "comment:\"use 'x'\"" in tags

    def test_custom_keys_keep_case(self):
        tags = generate_tags("firstName", ConversionOptions(), keys=("xml", "json"), lowercase=False)
        assert tags == 'xml:"firstName" json:"firstName"'

    def test_strip_quotes(self):
        assert strip_quotes("'a'") == "a"
        assert strip_quotes('"a"') == "a"
        assert strip_quotes("'a") == "'a"
        assert strip_quotes("now()") == "now()"

    def test_escape_tag_value(self):
        assert escape_tag_value('a"b') == 'a\\"b'


# =============================================================================
# Renderer Tests
# =============================================================================

class TestGoTypes:
    """Tests for Go type mapping."""

    def test_every_kind_mapped(self):
        for kind in CanonicalType:
            if kind != C.STRUCT:
                assert kind in GO_TYPES

    @pytest.mark.parametrize("descriptor,expected", [
        (TypeDescriptor.scalar(C.UINT16), "uint16"),
        (TypeDescriptor.scalar(C.TIMESTAMP), "time.Time"),
        (TypeDescriptor.scalar(C.BYTES), "[]byte"),
        (TypeDescriptor.scalar(C.JSON), "json.RawMessage"),
        (TypeDescriptor.unknown(), "interface{}"),
        (TypeDescriptor.unknown(is_pointer=True), "*interface{}"),
        (TypeDescriptor.reference("Address"), "Address"),
        (TypeDescriptor.array_of(TypeDescriptor.scalar(C.STRING)), "[]string"),
        (TypeDescriptor.array_of(None), "[]interface{}"),
        (
            TypeDescriptor.array_of(TypeDescriptor.array_of(TypeDescriptor.scalar(C.INT32))),
            "[][]int32",
        ),
    ])
    def test_go_type(self, descriptor, expected):
        assert go_type(descriptor) == expected


class TestStructRenderer:
    """Tests for StructRenderer."""

    def test_single_struct(self):
        struct = StructSpec(
            name="User",
            fields=[
                make_field("Id", TypeDescriptor.scalar(C.INT64), tag='json:"id"'),
                make_field("Name", TypeDescriptor.scalar(C.STRING), tag='json:"name"'),
            ],
        )
        output = StructRenderer().render([struct])
        assert output == (
            "type User struct {\n"
            '\tId int64 `json:"id"`\n'
            '\tName string `json:"name"`\n'
            "}\n"
        )

    def test_imports_sorted(self):
        struct = StructSpec(
            name="Event",
            fields=[
                make_field("At", TypeDescriptor.scalar(C.TIMESTAMP)),
                make_field("Payload", TypeDescriptor.scalar(C.JSON)),
            ],
        )
        output = StructRenderer().render([struct])
        assert output.startswith('import (\n\t"encoding/json"\n\t"time"\n)\n\ntype Event struct {\n')

    def test_imports_from_element_and_nested(self):
        nested = StructSpec(
            name="Inner",
            fields=[make_field("Times", TypeDescriptor.array_of(TypeDescriptor.scalar(C.TIMESTAMP)))],
        )
        outer = StructSpec(
            name="Outer",
            fields=[make_field("Inner", TypeDescriptor.reference("Inner"))],
            nested_structs=[nested],
        )
        assert StructRenderer().collect_imports(outer.iter_structs()) == ["time"]

    def test_nested_before_owner(self):
        nested = StructSpec(name="UserAddress", fields=[make_field("City", TypeDescriptor.scalar(C.STRING))])
        outer = StructSpec(
            name="User",
            fields=[make_field("Address", TypeDescriptor.reference("UserAddress"))],
            nested_structs=[nested],
        )
        output = StructRenderer().render([outer])
        assert output.index("type UserAddress struct") < output.index("type User struct")
        assert "\n\ntype User struct {\n\tAddress UserAddress\n}\n" in output

    def test_empty_struct(self):
        assert StructRenderer().render([StructSpec(name="Empty")]) == "type Empty struct {\n}\n"

    def test_pointer_rule(self):
        """Test nullable, pointer and flag driven pointer rendering."""
        renderer = StructRenderer()
        plain = make_field("A", TypeDescriptor.scalar(C.STRING))
        nullable = make_field("B", TypeDescriptor.scalar(C.STRING), nullable=True)
        pointer = make_field("C", TypeDescriptor.unknown(is_pointer=True), nullable=True)
        array = make_field("D", TypeDescriptor.array_of(TypeDescriptor.scalar(C.INT32)), nullable=True)

        assert renderer.field_type(plain) == "string"
        assert renderer.field_type(nullable) == "*string"
        assert renderer.field_type(pointer) == "*interface{}"
        assert renderer.field_type(array) == "[]int32"

        flagged = StructRenderer(ConversionOptions(use_pointer_for_nullable=True))
        assert flagged.field_type(plain) == "*string"
        assert flagged.field_type(array) == "[]int32"

    def test_field_without_tag(self):
        field = make_field("X", TypeDescriptor.scalar(C.BOOL))
        assert StructRenderer().render_field(field) == "\tX bool"
