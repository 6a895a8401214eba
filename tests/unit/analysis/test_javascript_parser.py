"""Tests for JavaScript/TypeScript variable extraction."""

import pytest

from dauns.analysis.javascript_parser import (
    JavaScriptParser,
    infer_type,
    scan_variables_in_document,
)
from dauns.analysis.models import ImportType, RefactoringType
from dauns.analysis.text_document import StringDocument


@pytest.fixture
def parser():
    return JavaScriptParser()


def _type_of(declaration: str) -> str:
    """Infer the type of the first identifier declared in ``declaration``."""
    keyword_end = declaration.index(" ") + 1
    name_end = keyword_end
    while name_end < len(declaration) and (
        declaration[name_end].isalnum() or declaration[name_end] in "_$"
    ):
        name_end += 1
    return infer_type(declaration, name_end)


class TestTypeInference:
    """Right-hand side shape to type label."""

    @pytest.mark.parametrize(
        "declaration, expected",
        [
            ('const x = "hi";', "string"),
            ("const x = 'hi';", "string"),
            ("const x = `hi ${name}`;", "string"),
            ("let y = [1,2];", "array"),
            ("let o = { a: 1 };", "object"),
            ("let flag = true;", "boolean"),
            ("let flag = false", "boolean"),
            ("let nothing = null;", "null"),
            ("let missing = undefined;", "undefined"),
            ("const n = 42;", "number"),
            ("const n = -3.5e2;", "number"),
            ("const n = 0xFF;", "number"),
            ("const fn = function() {};", "function"),
            ("const fn = (a, b) => a + b;", "function"),
            ("const fn = async x => x;", "function"),
            ("var z = new Foo();", "Foo"),
            ("var m = new Map();", "Map"),
            ("var w = new (getClass())();", "instance"),
            ("const v = compute();", "unknown"),
            ("let x;", "unknown"),
        ],
    )
    def test_infers_type(self, declaration, expected):
        assert _type_of(declaration) == expected

    def test_assignment_in_later_statement_is_ignored(self):
        assert _type_of("let x;\nx = 5;") == "unknown"
        assert _type_of("let x; x = 5;") == "unknown"

    def test_trailing_comment_is_ignored(self):
        assert _type_of("const n = 5 // five") == "number"


class TestParseVariables:
    """Declarations, positions and statement-boundary filtering."""

    def test_spec_examples(self, parser):
        content = 'const x = "hi";\nlet y = [1,2];\nvar z = new Foo();\n'

        variables = parser.parse_variables(content, "app.js")

        assert [(v.name, v.type, v.declaration_type) for v in variables] == [
            ("x", "string", "const"),
            ("y", "array", "let"),
            ("z", "Foo", "var"),
        ]

    def test_positions_are_one_based_lines_zero_based_columns(self, parser):
        content = "\n  const total = 1;\n"

        (variable,) = parser.parse_variables(content, "app.js")

        assert variable.line == 2
        assert variable.character == 8
        assert variable.file_path == "app.js"
        assert variable.scope == "unknown"

    def test_results_are_grouped_by_declaration_kind(self, parser):
        content = "var a = 1;\nlet b = 2;\nconst c = 3;\nvar d = 4;\n"

        names = [v.name for v in parser.parse_variables(content, "app.js")]

        assert names == ["c", "b", "a", "d"]

    def test_keyword_must_start_a_statement(self, parser):
        content = "obj.var bar = 1;\n(const inner = 2);\nif (x) {let ok = 3;}\n"

        names = [v.name for v in parser.parse_variables(content, "app.js")]

        assert names == ["ok"]

    def test_dollar_identifiers(self, parser):
        (variable,) = parser.parse_variables("const $el = document.body;", "app.js")

        assert variable.name == "$el"

    def test_no_declarations(self, parser):
        assert parser.parse_variables("console.log(1);", "app.js") == []
        assert parser.parse_variables("", "app.js") == []

    def test_parsing_is_idempotent(self, parser):
        content = 'const a = "x";\nlet b = [];\n'

        assert parser.parse_variables(content, "f.js") == parser.parse_variables(
            content, "f.js"
        )

    def test_document_scanner_reports_zero_based_positions(self):
        document = StringDocument("let a = 1;\n  const b = {};\n", "doc.js")

        scanned = scan_variables_in_document(document)

        assert [(s.name, s.kind, s.line, s.character) for s in scanned] == [
            ("b", "const", 1, 8),
            ("a", "let", 0, 4),
        ]


class TestParseImports:
    """Only .js paths are recognised."""

    def test_es_import_and_require(self, parser):
        content = (
            'import { a } from "./a.js";\n'
            "const b = require('./b.js');\n"
            'import c from "c";\n'
        )

        imports = parser.parse_imports(content)

        assert [(i.path, i.type, i.line, i.character) for i in imports] == [
            ("./a.js", ImportType.IMPORT, 1, 0),
            ("./b.js", ImportType.REQUIRE, 2, 10),
        ]

    def test_side_effect_import(self, parser):
        (item,) = parser.parse_imports('import "./polyfill.js";')

        assert item.name == "./polyfill.js"


class TestReferences:
    def test_word_delimited_occurrences(self, parser):
        content = "let count = 0;\ncount++;\nrecount = count;\n$count = 1;\n"

        references = parser.get_variable_references(content, "count")

        assert [(r.line, r.character) for r in references] == [(1, 4), (2, 0), (3, 10)]
        assert references[1].context == "count++;"

    def test_context_is_limited_around_occurrence(self, parser):
        content = "x" * 40 + " target " + "y" * 40

        (reference,) = parser.get_variable_references(content, "target")

        assert reference.context == "x" * 19 + " target " + "y" * 19

    def test_supported_refactorings(self, parser):
        assert parser.get_supported_refactorings() == {
            RefactoringType.RENAME,
            RefactoringType.EXTRACT,
            RefactoringType.CONVERT,
            RefactoringType.INLINE,
        }
