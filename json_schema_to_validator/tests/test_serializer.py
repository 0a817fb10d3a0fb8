import pytest

from json_schema_to_validator.pipeline.ast_backends.expr_nodes import (
    Call,
    Const,
    DictExpr,
    ListExpr,
    Name,
    RegexLiteral,
    TupleExpr,
    call,
    dict_expr,
    subscript,
)
from json_schema_to_validator.pipeline.ast_backends.realizer import ExpressionRealizer
from json_schema_to_validator.pipeline.ast_backends.serializer import (
    ExpressionSerializer,
    escape_regex_pattern,
    escape_string,
    normalize_schema_name,
    render_literal,
)


class TestLiterals:
    """Test cases for literal rendering"""

    def test_escape_string(self):
        assert escape_string('a\\b"c\'d\ne\rf\tg') == 'a\\\\b\\"c\\\'d\\ne\\rf\\tg'

    def test_escape_string_control_characters(self):
        assert escape_string("\x00") == "\\x00"

    def test_escape_regex_pattern_keeps_regex_syntax(self):
        assert escape_regex_pattern(r"^\d+(\.\d+)?$") == "^\\\\d+(\\\\.\\\\d+)?$"
        assert escape_regex_pattern('say "hi"') == 'say \\"hi\\"'

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, "None"),
            (True, "True"),
            (False, "False"),
            (3, "3"),
            (1.5, "1.5"),
            ("x", '"x"'),
            (..., "..."),
            ([1, "a"], '[1, "a"]'),
            ((1,), "(1,)"),
            ({"a": [True]}, '{"a": [True]}'),
        ],
    )
    def test_render_literal(self, value, expected):
        assert render_literal(value) == expected

    def test_rendered_literals_evaluate_back(self):
        value = {"text": 'line\nbreak "quoted"', "items": [1, 2.5, None, False]}
        assert eval(render_literal(value)) == value

    def test_unknown_literal_raises(self):
        with pytest.raises(TypeError):
            render_literal(object())


class TestNormalizeSchemaName:
    """Test cases for identifier sanitization"""

    @pytest.mark.parametrize(
        "name,expected",
        [
            (None, "GeneratedSchema"),
            ("", "GeneratedSchema"),
            ("---", "GeneratedSchema"),
            ("userSchema", "UserSchema"),
            ("user-profile", "Userprofile"),
            ("9lives", "_9lives"),
            ("none", "None_"),
            ("Pet_Store", "Pet_Store"),
        ],
    )
    def test_normalize(self, name, expected):
        assert normalize_schema_name(name) == expected


class TestExpressionSerializer:
    """Test cases for layout of expressions"""

    def test_inline_call(self):
        expr = call("fields.String", validate=call("validate.Length", min=Const(1)))
        assert ExpressionSerializer().serialize(expr) == "fields.String(validate=validate.Length(min=1))"

    def test_multiline_call_uses_indent_unit(self):
        expr = Call(Name("create_model"), (Const("User"),), (("name", TupleExpr((Name("str"), Const(...)))),), multiline=True)
        assert ExpressionSerializer("  ").serialize(expr) == 'create_model(\n  "User",\n  name=(str, ...),\n)'

    def test_nested_dict_goes_multiline(self):
        expr = dict_expr({"type": Const("object"), "properties": dict_expr({"a": dict_expr({"type": Const("string")})})})
        expected = '{\n    "type": "object",\n    "properties": {\n        "a": {"type": "string"},\n    },\n}'
        assert ExpressionSerializer().serialize(expr) == expected

    def test_flat_displays_stay_inline(self):
        serializer = ExpressionSerializer()
        assert serializer.serialize(ListExpr((Const("a"), Const("b")))) == '["a", "b"]'
        assert serializer.serialize(TupleExpr((Name("x"),))) == "(x,)"
        assert serializer.serialize(DictExpr()) == "{}"

    def test_field_pair_stays_inline(self):
        serializer = ExpressionSerializer()
        pair = TupleExpr((Name("StrictStr"), call("Field", Const(...), alias=Const("class"))))
        assert serializer.serialize(pair) == '(StrictStr, Field(..., alias="class"))'
        listed = ListExpr((call("fields.String"),))
        assert serializer.serialize(listed) == "[\n    fields.String(),\n]"

    def test_subscripts(self):
        serializer = ExpressionSerializer()
        assert serializer.serialize(subscript("dict", Name("str"), Name("Any"))) == "dict[str, Any]"
        assert serializer.serialize(subscript("tuple")) == "tuple[()]"

    def test_regex_literal(self):
        assert ExpressionSerializer().serialize(RegexLiteral(r"^\w+$")) == '"^\\\\w+$"'


class TestExpressionRealizer:
    """Test cases for evaluating expressions"""

    def test_serialized_and_realized_agree(self):
        expr = dict_expr(
            {
                "pattern": RegexLiteral(r"^\d{3}$"),
                "items": ListExpr((Const(1), TupleExpr((Const("a"),)))),
                "nested": subscript("dict", Name("str"), Name("int")),
            }
        )
        realized = ExpressionRealizer({}).realize(expr)
        assert realized == eval(ExpressionSerializer().serialize(expr))
        assert realized["pattern"] == r"^\d{3}$"

    def test_bind_declarations_in_order(self):
        realizer = ExpressionRealizer({"Wrapper": list})
        bound = realizer.bind([("Items", TupleExpr((Const(1), Const(2)))), ("Wrapped", call("Wrapper", Name("Items")))])
        assert bound == {"Items": (1, 2), "Wrapped": [1, 2]}

    def test_constants_are_copied(self):
        default = {"a": [1]}
        realized = ExpressionRealizer({}).realize(Const(default))
        realized["a"].append(2)
        assert default == {"a": [1]}

    def test_unknown_name_raises(self):
        with pytest.raises(NameError):
            ExpressionRealizer({}).realize(Name("NotDefinedAnywhere"))
