"""Data models for the file writer.

This module defines the write specification returned by decision functions,
the per-object evaluation result, and the plan and result types produced by
the reconciler. All models are dataclasses.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Literal, Mapping, Optional

from .errors import UnwritableSpecError

if TYPE_CHECKING:
    from .rules import RuleSet


class FileFormat(str, Enum):
    """Format tags understood by the codec registry."""
    FRONTMATTER_DOCUMENT = "frontmatter-document"
    JSON = "json"
    YAML = "yaml"

    @classmethod
    def parse(cls, value: Any) -> Optional["FileFormat"]:
        """Return the matching format, or None for unknown tags."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(frozen=True)
class DecisionUtils:
    """Utility bundle passed to every decision function call.

    Attributes:
        slugify: Converts a string to a filename-safe slug; raises
                 InvalidInputError for empty or non-string input
    """
    slugify: Callable[[Any], str]


@dataclass
class WriteSpec:
    """One desired file write, as returned by a decision function.

    Attributes:
        path: File path relative to the output directory (the file identity)
        format: Codec tag for the file
        content: Format-specific payload ({body, frontmatter} for documents,
                 a mapping for structured data)
        append: Combine with other specs for the same path instead of
                replacing them
    """
    path: str
    format: FileFormat
    content: Any
    append: bool = False

    @classmethod
    def coerce(cls, value: Any) -> "WriteSpec":
        """Build a WriteSpec from a decision function return value.

        Accepts a WriteSpec or a mapping with path/format/content/append keys.

        Raises:
            UnwritableSpecError: If the value has no usable path or format
        """
        if isinstance(value, WriteSpec):
            path, raw_format, content, append = value.path, value.format, value.content, value.append
        elif isinstance(value, Mapping):
            path = value.get("path")
            raw_format = value.get("format")
            content = value.get("content")
            append = value.get("append", False)
        else:
            raise UnwritableSpecError(f"unsupported spec type {type(value).__name__}")

        if not isinstance(path, str) or not path.strip():
            raise UnwritableSpecError("missing path")

        file_format = FileFormat.parse(raw_format)
        if file_format is None:
            raise UnwritableSpecError(f"unknown format {raw_format!r}")

        return cls(path=path, format=file_format, content=content, append=bool(append))


@dataclass
class TargetFile:
    """Merged write payload for one resolved path.

    Attributes:
        path: Resolved absolute path
        format: Codec tag
        content: Single payload, or a list of payloads after appends
    """
    path: str
    format: FileFormat
    content: Any


class EvaluationStatus(str, Enum):
    OK = "ok"
    SKIP = "skip"
    INVALID = "invalid"


@dataclass(frozen=True)
class Evaluation:
    """Result of evaluating the decision function for one object.

    Exactly one of three shapes:
    - OK: ``spec`` holds a valid WriteSpec
    - SKIP: the object opted out of file writing (``reason`` is informative)
    - INVALID: the decision function failed (``reason`` describes why)
    """
    status: EvaluationStatus
    spec: Optional[WriteSpec] = None
    reason: Optional[str] = None

    @classmethod
    def ok(cls, spec: WriteSpec) -> "Evaluation":
        return cls(EvaluationStatus.OK, spec=spec)

    @classmethod
    def skip(cls, reason: Optional[str] = None) -> "Evaluation":
        return cls(EvaluationStatus.SKIP, reason=reason)

    @classmethod
    def invalid(cls, reason: str) -> "Evaluation":
        return cls(EvaluationStatus.INVALID, reason=reason)


@dataclass
class ObjectFailure:
    """An object whose decision function evaluation failed.

    Attributes:
        index: Position of the object in the input set
        object_id: Object id from metadata (None if unknown)
        model_name: Owning model name (None if unknown)
        reason: Error description
    """
    index: int
    object_id: Optional[str]
    model_name: Optional[str]
    reason: str


@dataclass
class ReconcilePlan:
    """Target file state and deletions computed for a run.

    Attributes:
        target: Resolved path -> merged payload, in object insertion order
        to_delete: Previously written paths no object maps to anymore
        object_failures: Objects skipped because evaluation failed
        skipped_count: Objects that opted out of file writing
    """
    target: Dict[str, TargetFile] = field(default_factory=dict)
    to_delete: List[str] = field(default_factory=list)
    object_failures: List[ObjectFailure] = field(default_factory=list)
    skipped_count: int = 0


FileAction = Literal["created", "deleted", "create_failed", "delete_failed"]


@dataclass
class FileOutcome:
    """Outcome of one filesystem operation.

    Attributes:
        path: Resolved absolute path
        action: What happened to the path
        error: Error description for failed actions
    """
    path: str
    action: FileAction
    error: Optional[str] = None


@dataclass
class ReconcileResult:
    """Result of a reconciliation run.

    Attributes:
        plan: The plan that was applied (or previewed)
        outcomes: Per-path outcomes in the order they were applied
        written_files: New prior file state (the target key set)
        dry_run: True if nothing was applied
    """
    plan: ReconcilePlan
    outcomes: List[FileOutcome] = field(default_factory=list)
    written_files: List[str] = field(default_factory=list)
    dry_run: bool = False

    def _paths(self, action: str) -> List[str]:
        return [outcome.path for outcome in self.outcomes if outcome.action == action]

    @property
    def created(self) -> List[str]:
        return self._paths("created")

    @property
    def deleted(self) -> List[str]:
        return self._paths("deleted")

    @property
    def failed_writes(self) -> List[str]:
        return self._paths("create_failed")

    @property
    def failed_deletes(self) -> List[str]:
        return self._paths("delete_failed")

    @property
    def has_failures(self) -> bool:
        return bool(
            self.plan.object_failures or self.failed_writes or self.failed_deletes
        )


@dataclass
class ExportConfig:
    """Export configuration loaded from .content-files/config.yaml.

    Attributes:
        output_dir: Directory that write spec paths resolve against
        source: Object snapshot path or URL (None to use CONTENT_SOURCE_URL)
        decision_function: Optional "module:function" reference used
                           instead of the rule set
        rules: Rule set mapping objects to files
        restrict_to_output_dir: Refuse writes outside output_dir
    """
    output_dir: str = "."
    source: Optional[str] = None
    decision_function: Optional[str] = None
    rules: Optional["RuleSet"] = None
    restrict_to_output_dir: bool = True
