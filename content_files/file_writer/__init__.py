"""File writer library for exporting content objects.

This package maps content-source objects to files on disk (markdown with
YAML frontmatter, JSON, YAML) and reconciles the written file set across
runs: stale files are deleted, objects targeting the same path are merged,
and failures are isolated per object and per file.
"""

from .reconciler import Reconciler, transform
from .models import (
    DecisionUtils,
    Evaluation,
    EvaluationStatus,
    ExportConfig,
    FileFormat,
    FileOutcome,
    ObjectFailure,
    ReconcilePlan,
    ReconcileResult,
    TargetFile,
    WriteSpec,
)
from .errors import (
    FileWriterError,
    InvalidInputError,
    UnwritableSpecError,
    FilesystemError,
    DeleteFailedError,
    WriteFailedError,
    CodecError,
    ConfigError,
)
from .codecs import CodecRegistry
from .config_loader import ConfigLoader
from .filesystem import FilesystemAdapter
from .rules import (
    ContentMapping,
    DataAnswers,
    LayoutSource,
    PageAnswers,
    PathKind,
    PathTemplate,
    Rule,
    RuleMatch,
    RuleSet,
    compile_answers,
    import_decision_function,
)
from .slugify import SlugConverter, slugify

__all__ = [
    'Reconciler',
    'transform',
    'DecisionUtils',
    'Evaluation',
    'EvaluationStatus',
    'ExportConfig',
    'FileFormat',
    'FileOutcome',
    'ObjectFailure',
    'ReconcilePlan',
    'ReconcileResult',
    'TargetFile',
    'WriteSpec',
    'FileWriterError',
    'InvalidInputError',
    'UnwritableSpecError',
    'FilesystemError',
    'DeleteFailedError',
    'WriteFailedError',
    'CodecError',
    'ConfigError',
    'CodecRegistry',
    'ConfigLoader',
    'FilesystemAdapter',
    'ContentMapping',
    'DataAnswers',
    'LayoutSource',
    'PageAnswers',
    'PathKind',
    'PathTemplate',
    'Rule',
    'RuleMatch',
    'RuleSet',
    'compile_answers',
    'import_decision_function',
    'SlugConverter',
    'slugify',
]
