"""Unit tests for file_writer.models module."""

import pytest

from content_files.file_writer.errors import UnwritableSpecError
from content_files.file_writer.models import (
    Evaluation,
    EvaluationStatus,
    FileFormat,
    FileOutcome,
    ReconcilePlan,
    ReconcileResult,
    WriteSpec,
)


class TestFileFormat:
    """Test cases for FileFormat."""

    @pytest.mark.parametrize("tag,expected", [
        ("frontmatter-document", FileFormat.FRONTMATTER_DOCUMENT),
        ("json", FileFormat.JSON),
        ("yaml", FileFormat.YAML),
        (FileFormat.JSON, FileFormat.JSON),
    ])
    def test_parse_known_tags(self, tag, expected):
        assert FileFormat.parse(tag) == expected

    @pytest.mark.parametrize("tag", ["yml", "toml", None, 3])
    def test_parse_unknown_tags(self, tag):
        assert FileFormat.parse(tag) is None


class TestWriteSpecCoerce:
    """Test cases for WriteSpec.coerce."""

    def test_from_mapping(self):
        """Mappings are converted with append defaulting to False."""
        spec = WriteSpec.coerce({"path": "a.json", "format": "json", "content": {"a": 1}})

        assert spec == WriteSpec("a.json", FileFormat.JSON, {"a": 1}, False)

    def test_append_is_normalized_to_bool(self):
        spec = WriteSpec.coerce({"path": "a.json", "format": "json", "content": {}, "append": 1})

        assert spec.append is True

    def test_from_write_spec_with_string_format(self):
        """A WriteSpec built with a string tag gets a parsed format."""
        spec = WriteSpec.coerce(WriteSpec("a.yml", "yaml", {}))

        assert spec.format == FileFormat.YAML

    @pytest.mark.parametrize("value,reason", [
        ({"format": "json"}, "missing path"),
        ({"path": "  ", "format": "json"}, "missing path"),
        ({"path": 5, "format": "json"}, "missing path"),
        ({"path": "a", "format": "toml"}, "unknown format 'toml'"),
        (["a.json"], "unsupported spec type list"),
    ])
    def test_unwritable_values(self, value, reason):
        """Unusable specs raise UnwritableSpecError with a reason."""
        with pytest.raises(UnwritableSpecError) as exc_info:
            WriteSpec.coerce(value)

        assert exc_info.value.reason == reason


class TestEvaluation:
    """Test cases for Evaluation constructors."""

    def test_constructors(self):
        spec = WriteSpec("a.json", FileFormat.JSON, {})

        assert Evaluation.ok(spec).status == EvaluationStatus.OK
        assert Evaluation.ok(spec).spec is spec
        assert Evaluation.skip().status == EvaluationStatus.SKIP
        assert Evaluation.invalid("boom").reason == "boom"


class TestReconcileResult:
    """Test cases for ReconcileResult properties."""

    def test_outcome_views(self):
        """Outcomes are grouped by action."""
        result = ReconcileResult(
            plan=ReconcilePlan(),
            outcomes=[
                FileOutcome("/a", "deleted"),
                FileOutcome("/b", "delete_failed", "denied"),
                FileOutcome("/c", "created"),
                FileOutcome("/d", "create_failed", "denied"),
            ],
        )

        assert result.deleted == ["/a"]
        assert result.failed_deletes == ["/b"]
        assert result.created == ["/c"]
        assert result.failed_writes == ["/d"]
        assert result.has_failures

    def test_clean_result_has_no_failures(self):
        result = ReconcileResult(plan=ReconcilePlan(), outcomes=[FileOutcome("/c", "created")])

        assert not result.has_failures
