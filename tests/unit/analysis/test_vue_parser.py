"""Tests for Vue single-file component parsing."""

import pytest

from dauns.analysis.models import ImportType, RefactoringType
from dauns.analysis.vue_parser import VueParser


@pytest.fixture
def parser():
    return VueParser()


class TestParseVariables:
    def test_script_variables_use_file_positions(self, parser, sample_vue):
        variables = parser.parse_variables(sample_vue, "component.vue")

        script = [v for v in variables if v.scope != "template"]
        assert [(v.name, v.type, v.declaration_type, v.line, v.character) for v in script] == [
            ("query", "string", "const", 8, 6),
            ("items", "array", "let", 9, 4),
        ]

    def test_template_variables_point_at_the_name(self, parser, sample_vue):
        variables = parser.parse_variables(sample_vue, "component.vue")

        template = [v for v in variables if v.scope == "template"]
        assert [(v.name, v.line, v.character) for v in template] == [
            ("query", 3, 20),
            ("item", 4, 15),
            ("item", 4, 33),
        ]
        assert all(v.type == "any" for v in template)
        assert all(v.declaration_type == "vue-template-variable" for v in template)

    def test_script_variables_come_before_template_variables(self, parser, sample_vue):
        variables = parser.parse_variables(sample_vue, "component.vue")

        assert [v.scope for v in variables][:2] == ["unknown", "unknown"]

    def test_prop_binding(self, parser):
        content = '<template><my-card :title="heading" /></template>'

        (variable,) = parser.parse_variables(content, "card.vue")

        assert variable.name == "heading"
        assert variable.line == 1
        assert variable.character == 27

    def test_component_without_blocks(self, parser):
        assert parser.parse_variables("<style>.a { color: red; }</style>", "x.vue") == []


class TestImportsAndReferences:
    def test_imports_on_the_script_tag_line_are_offset(self, parser):
        content = "<script>import a from './a.js';</script>"

        (item,) = parser.parse_imports(content)

        assert (item.path, item.type, item.line, item.character) == (
            "./a.js",
            ImportType.IMPORT,
            1,
            8,
        )

    def test_no_script_block_has_no_imports(self, parser):
        assert parser.parse_imports("<template><div /></template>") == []

    def test_references_cover_script_then_template(self, parser, sample_vue):
        references = parser.get_variable_references(sample_vue, "items")

        assert [(r.line, r.character) for r in references] == [(9, 4), (4, 23)]

    def test_supported_refactorings(self, parser):
        assert parser.get_supported_refactorings() == {
            RefactoringType.RENAME,
            RefactoringType.EXTRACT,
        }
