"""Cross-file reference tracking and unused-variable detection.

Both analyses are textual: an occurrence of a name anywhere counts as a
reference, including the declaration itself.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from .models import VariableInfo
from .parser import find_references_in_text, identifier_pattern


@dataclass(frozen=True)
class FileReference:
    """Location of one occurrence of a variable name in some file."""

    file: str
    line: int
    character: int


@dataclass
class VariableReference:
    """A variable together with every occurrence of its name across files."""

    variable: VariableInfo
    references: list[FileReference] = field(default_factory=list)


@dataclass(frozen=True)
class UnusedVariable:
    """A declaration whose name occurs at most once in its file."""

    variable: VariableInfo
    usage_count: int


CrossReferenceMap = dict[str, VariableReference]


class CrossReferenceTracker:
    """Tracks variable references across a set of documents."""

    @staticmethod
    def track_cross_references(
        documents: Mapping[str, str],
        variables_by_file: Mapping[str, Iterable[VariableInfo]],
        word_chars: str = r"\w$",
    ) -> CrossReferenceMap:
        """Build a name-keyed map of every occurrence in every document.

        Args:
            documents: File path to file content.
            variables_by_file: File path to the variables declared in it.
            word_chars: Identifier continuation characters for delimiting matches.

        Returns:
            Map from variable name to its first declaration and all references.
            Later declarations of an already-seen name share its entry.
        """
        cross_references: CrossReferenceMap = {}
        for variables in variables_by_file.values():
            for variable in variables:
                cross_references.setdefault(
                    variable.name, VariableReference(variable=variable)
                )

        for file_path, content in documents.items():
            for name, entry in cross_references.items():
                for reference in find_references_in_text(content, name, word_chars):
                    entry.references.append(
                        FileReference(
                            file=file_path,
                            line=reference.line,
                            character=reference.character,
                        )
                    )

        return cross_references

    @staticmethod
    def find_unused_variables(cross_references: CrossReferenceMap) -> list[VariableInfo]:
        """Variables referenced at most once (only their own declaration)."""
        return [
            entry.variable
            for entry in cross_references.values()
            if len(entry.references) <= 1
        ]

    @staticmethod
    def find_hotspot_variables(
        cross_references: CrossReferenceMap, threshold: int = 10
    ) -> list[VariableInfo]:
        """Variables with at least ``threshold`` references."""
        return [
            entry.variable
            for entry in cross_references.values()
            if len(entry.references) >= threshold
        ]

    @staticmethod
    def format_cross_references(cross_references: CrossReferenceMap) -> str:
        lines = ["Cross-Reference Analysis:", ""]
        for name, entry in cross_references.items():
            variable = entry.variable
            lines.append(f"{name} ({variable.declaration_type}, {variable.type}):")
            if entry.references:
                lines.extend(
                    f"  - {ref.file}:{ref.line}:{ref.character}"
                    for ref in entry.references
                )
            else:
                lines.append("  - No external references found")
            lines.append("")
        return "\n".join(lines)


class UnusedVariableDetector:
    """Finds declarations that are never used in their own file."""

    @staticmethod
    def find_unused_variables(
        content: str, variables: Iterable[VariableInfo], word_chars: str = r"\w$"
    ) -> list[UnusedVariable]:
        """Return variables whose name occurs at most once in ``content``.

        Function-typed variables are skipped since they are often exported
        or called from other files.
        """
        unused = []
        for variable in variables:
            if variable.type == "function":
                continue
            usage_count = sum(
                1 for _ in identifier_pattern(variable.name, word_chars).finditer(content)
            )
            if usage_count <= 1:
                unused.append(UnusedVariable(variable=variable, usage_count=usage_count))
        return unused
