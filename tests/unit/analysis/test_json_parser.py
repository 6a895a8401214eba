"""Tests for JSON key extraction."""

import logging

import pytest

from dauns.analysis.json_parser import JSONParser, json_type, strip_json_comments
from dauns.analysis.models import RefactoringType


@pytest.fixture
def parser():
    return JSONParser()


def test_nested_keys_get_dotted_scopes(parser):
    content = '{"a": 1, "b": {"c": "x", "d": null}}'

    variables = parser.parse_variables(content, "data.json")

    assert [(v.name, v.type, v.scope) for v in variables] == [
        ("a", "number", "root"),
        ("b", "object", "root"),
        ("c", "string", "b"),
        ("d", "null", "b"),
    ]
    assert all(v.declaration_type == "property" for v in variables)
    assert all((v.line, v.character) == (0, 0) for v in variables)


def test_values_are_recorded_as_text(parser):
    variables = parser.parse_variables('{"a": 1, "b": {"c": "x"}}', "data.json")

    assert [v.value for v in variables] == ["1", '{"c":"x"}', "x"]


def test_arrays_are_traversed_by_index(parser):
    content = '{"list": [1, {"k": true}]}'

    variables = parser.parse_variables(content, "data.json")

    assert [(v.name, v.type, v.scope) for v in variables] == [
        ("list", "array", "root"),
        ("0", "number", "list"),
        ("1", "object", "list"),
        ("k", "boolean", "list.1"),
    ]


def test_invalid_json_is_logged_and_empty(parser, caplog):
    with caplog.at_level(logging.WARNING, logger="dauns.parser"):
        variables = parser.parse_variables("{not json", "broken.json")

    assert variables == []
    assert "Invalid JSON in broken.json" in caplog.text


def test_deeply_nested_array_is_logged_and_empty(parser, caplog):
    content = "[" * 100000 + "]" * 100000

    with caplog.at_level(logging.WARNING, logger="dauns.parser"):
        variables = parser.parse_variables(content, "deep.json")

    assert variables == []
    assert "Invalid JSON in deep.json" in caplog.text


def test_deeply_nested_object_does_not_raise(parser):
    content = '{"a":' * 1500 + "1" + "}" * 1500

    assert parser.parse_variables(content, "deep.json") == []


def test_nesting_below_the_recursion_limit_is_walked(parser):
    content = '{"a":' * 50 + "1" + "}" * 50

    variables = parser.parse_variables(content, "deep.json")

    assert len(variables) == 50
    assert variables[-1].scope == ".".join(["a"] * 49)
    assert variables[-1].type == "number"


def test_scalar_document_has_no_keys(parser):
    assert parser.parse_variables("42", "value.json") == []


def test_jsonc_comments_are_stripped(parser):
    content = '{\n  // port\n  "port": 80, /* block */ "url": "http://x//y"\n}'

    variables = parser.parse_variables(content, "settings.jsonc")

    assert [(v.name, v.value) for v in variables] == [
        ("port", "80"),
        ("url", "http://x//y"),
    ]


def test_comments_are_not_stripped_for_plain_json(parser):
    assert parser.parse_variables('{"a": 1} // trailing', "data.json") == []


def test_strip_json_comments_keeps_strings():
    assert strip_json_comments('"a // b" // c') == '"a // b" '


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, "null"),
        (True, "boolean"),
        (3, "number"),
        (1.5, "number"),
        ("s", "string"),
        ([], "array"),
        ({}, "object"),
    ],
)
def test_json_type(value, expected):
    assert json_type(value) == expected


def test_no_imports_references_and_rename_only(parser):
    assert parser.parse_imports('{"a": 1}') == []
    assert parser.get_variable_references('{"a": 1}', "a") == []
    assert parser.get_supported_refactorings() == {RefactoringType.RENAME}
