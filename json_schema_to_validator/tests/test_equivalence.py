import json
from pathlib import Path

import pytest

from json_schema_to_validator import SUPPORTED_TARGETS, accepts, convert_to_runtime
from json_schema_to_validator.pipeline.ast_backends.serializer import normalize_schema_name

TEST_DATA = Path(__file__).parent / "test_data"

with open(TEST_DATA / "equivalence_cases.json") as f:
    CASES = json.load(f)


def exec_generated(code):
    namespace = {"__name__": "generated_validators"}
    exec(compile(code, "<generated>", "exec"), namespace)
    return namespace


@pytest.mark.parametrize("target", SUPPORTED_TARGETS)
@pytest.mark.parametrize("case", CASES, ids=[case["name"] for case in CASES])
def test_generated_code_agrees_with_runtime_object(case, target):
    options = case.get("options", {})
    result = convert_to_runtime(case["schema"], target, options)
    namespace = exec_generated(result.code)
    generated = namespace[normalize_schema_name(options.get("schema_name"))]

    for value in case["values"]:
        expected = accepts(target, result.schema, value)
        assert accepts(target, generated, value) == expected, f"{target} disagrees on {value!r}"


@pytest.mark.parametrize("target", SUPPORTED_TARGETS)
@pytest.mark.parametrize("case", CASES, ids=[case["name"] for case in CASES])
def test_generated_code_without_type_inference_agrees(case, target):
    options = {**case.get("options", {}), "generate_type_inference": False, "indent": "\t"}
    result = convert_to_runtime(case["schema"], target, options)
    namespace = exec_generated(result.code)
    generated = namespace[normalize_schema_name(options.get("schema_name"))]

    for value in case["values"]:
        assert accepts(target, generated, value) == accepts(target, result.schema, value)


@pytest.mark.parametrize("target", SUPPORTED_TARGETS)
def test_user_scenario_on_every_target(target):
    schema = CASES[0]["schema"]
    result = convert_to_runtime(schema, target)
    assert not accepts(target, result.schema, {"id": "x", "email": "a"})
    assert accepts(target, result.schema, {"id": 1, "email": "a@b.com"})


@pytest.mark.parametrize("target", SUPPORTED_TARGETS)
def test_required_keys_are_enforced_on_every_target(target):
    schema = {
        "type": "object",
        "properties": {"a": {"type": "string"}, "b": {"type": "integer"}},
        "required": ["a", "b"],
    }
    result = convert_to_runtime(schema, target)
    assert accepts(target, result.schema, {"a": "x", "b": 1})
    assert not accepts(target, result.schema, {"a": "x"})
    assert not accepts(target, result.schema, {"b": 1})
