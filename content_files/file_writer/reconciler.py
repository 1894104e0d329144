"""File-set reconciliation engine.

The reconciler turns an object set and a decision function into files on
disk. A run has three stages:

1. Grouping & merge: evaluate the decision function for every object and
   group the resulting write specs by resolved path. Specs with
   ``append: true`` are collected into an ordered list; other specs replace
   whatever was there (last write wins).
2. Diff: every path written by the previous run that no object maps to
   anymore is scheduled for deletion. Paths the previous run did not write
   are never deleted.
3. Apply: delete stale files, then write every target file. A failure on
   one path is logged and never stops the others.

The previous run's file set is passed in explicitly and the new one is
returned in the result; persisting it is the caller's job.
"""

import logging
from typing import Any, Callable, Iterable, List, Optional, Sequence, Set, Tuple

from content_files.models.content_object import ContentObject
from .codecs import CodecRegistry
from .errors import FilesystemError, InvalidInputError, UnwritableSpecError
from .filesystem import FilesystemAdapter
from .models import (
    DecisionUtils,
    Evaluation,
    EvaluationStatus,
    FileOutcome,
    ObjectFailure,
    ReconcilePlan,
    ReconcileResult,
    TargetFile,
    WriteSpec,
)
from .rules import DecisionFunction
from .slugify import SlugConverter

logger = logging.getLogger(__name__)


class Reconciler:
    """Reconciles the files on disk with the files an object set maps to.

    Example:
        >>> reconciler = Reconciler(FilesystemAdapter("./site"))
        >>> result = reconciler.run(snapshot.objects, rules, prior=state.written_files)
        >>> state.written_files = result.written_files
    """

    def __init__(
        self,
        filesystem: Optional[FilesystemAdapter] = None,
        codecs: Optional[CodecRegistry] = None,
        slugify: Optional[Callable[[Any], str]] = None,
    ):
        """Initialize the reconciler.

        Args:
            filesystem: Adapter for file operations (defaults to the current
                        working directory)
            codecs: Codec registry (defaults to the built-in formats)
            slugify: Slug utility handed to decision functions
        """
        self.filesystem = filesystem or FilesystemAdapter(".")
        self.codecs = codecs or CodecRegistry()
        self.utils = DecisionUtils(slugify=slugify or SlugConverter.slugify)

    def evaluate(self, obj: ContentObject, decide: DecisionFunction) -> Evaluation:
        """Evaluate the decision function for one object.

        Never raises: failures of the decision function become INVALID, and
        falsy or unwritable specs become SKIP.
        """
        try:
            value = decide(obj, self.utils)
        except InvalidInputError as e:
            return Evaluation.invalid(str(e))
        except Exception as e:  # noqa: BLE001
            return Evaluation.invalid(f"{type(e).__name__}: {e}")

        if not value:
            return Evaluation.skip("no write spec")

        try:
            spec = WriteSpec.coerce(value)
        except UnwritableSpecError as e:
            return Evaluation.skip(e.reason)

        if not self.codecs.supports(spec.format):
            return Evaluation.skip(f"no codec for {spec.format.value}")

        return Evaluation.ok(spec)

    def build_target(
        self,
        objects: Iterable[ContentObject],
        decide: DecisionFunction,
    ) -> ReconcilePlan:
        """Group write specs by resolved path (stage 1).

        Returns:
            ReconcilePlan with the target file state, object failures and
            skip count filled in (to_delete is left empty)
        """
        plan = ReconcilePlan()
        # Paths whose content list was created here and may be appended in place
        sequences: Set[str] = set()

        for index, obj in enumerate(objects):
            evaluation = self.evaluate(obj, decide)

            path = None
            if evaluation.status == EvaluationStatus.OK:
                path = self.filesystem.resolve(evaluation.spec.path)
                # Never tracked, so a refused path can't be deleted by a later run
                if not self.filesystem.is_writable(path):
                    evaluation = Evaluation.invalid(
                        f"path {path} is outside output directory {self.filesystem.base_dir}"
                    )

            if evaluation.status == EvaluationStatus.INVALID:
                failure = ObjectFailure(
                    index=index,
                    object_id=obj.metadata.id if obj.metadata else None,
                    model_name=obj.model_name,
                    reason=evaluation.reason or "unknown error",
                )
                plan.object_failures.append(failure)
                logger.error(
                    f"Could not process object {describe_failure(failure)}: {failure.reason}"
                )
                continue

            if evaluation.status == EvaluationStatus.SKIP:
                plan.skipped_count += 1
                logger.debug(f"Skipping object at index {index}: {evaluation.reason}")
                continue

            spec = evaluation.spec
            existing = plan.target.get(path)

            if existing is not None and spec.append:
                if path not in sequences:
                    if isinstance(existing.content, list):
                        existing.content = list(existing.content)
                    else:
                        existing.content = [existing.content]
                    sequences.add(path)
                existing.content.append(spec.content)
            else:
                plan.target[path] = TargetFile(path=path, format=spec.format, content=spec.content)
                sequences.discard(path)

        logger.info(
            f"Mapped objects to {len(plan.target)} file(s) "
            f"({plan.skipped_count} skipped, {len(plan.object_failures)} failed)"
        )
        return plan

    @staticmethod
    def diff(target_paths: Iterable[str], prior: Iterable[str]) -> List[str]:
        """Return previously written paths missing from the target (stage 2).

        Prior order is preserved and duplicates are dropped.
        """
        target = set(target_paths)
        return [path for path in dict.fromkeys(prior) if path not in target]

    def plan(
        self,
        objects: Iterable[ContentObject],
        decide: DecisionFunction,
        prior: Iterable[str] = (),
    ) -> ReconcilePlan:
        """Compute the full plan (stages 1 and 2) without touching the disk."""
        plan = self.build_target(objects, decide)
        plan.to_delete = self.diff(plan.target.keys(), prior)
        return plan

    def apply(self, plan: ReconcilePlan, dry_run: bool = False) -> ReconcileResult:
        """Delete stale files, then write target files (stage 3).

        Args:
            plan: Plan from plan()
            dry_run: Log what would happen without changing anything

        Returns:
            ReconcileResult whose written_files is the target key set,
            including paths whose write failed
        """
        result = ReconcileResult(
            plan=plan,
            written_files=list(plan.target.keys()),
            dry_run=dry_run,
        )

        for path in plan.to_delete:
            if dry_run:
                logger.info(f"[DRYRUN] Would delete file: {path}")
                continue
            result.outcomes.append(self._delete(path))

        for path, target_file in plan.target.items():
            if dry_run:
                logger.info(f"[DRYRUN] Would create file: {path}")
                continue
            result.outcomes.append(self._write(target_file))

        if not dry_run:
            logger.info(
                f"Reconciliation complete: {len(result.created)} created, "
                f"{len(result.deleted)} deleted, "
                f"{len(result.failed_writes) + len(result.failed_deletes)} failed"
            )
        return result

    def run(
        self,
        objects: Iterable[ContentObject],
        decide: Optional[DecisionFunction],
        prior: Iterable[str] = (),
        dry_run: bool = False,
    ) -> ReconcileResult:
        """Run all three stages.

        When no decision function is configured nothing is written or
        deleted, and the prior file set is returned unchanged.
        """
        prior = list(prior)
        if decide is None:
            logger.warning("No decision function configured - no files will be written")
            return ReconcileResult(plan=ReconcilePlan(), written_files=prior, dry_run=dry_run)

        plan = self.plan(objects, decide, prior)
        return self.apply(plan, dry_run=dry_run)

    def _delete(self, path: str) -> FileOutcome:
        try:
            self.filesystem.delete(path)
        except FilesystemError as e:
            logger.warning(f"Could not delete file: {path}")
            logger.debug(f"Delete failed for {path}: {e}")
            return FileOutcome(path=path, action="delete_failed", error=str(e))
        except Exception as e:  # noqa: BLE001
            logger.warning(f"Could not delete file: {path}")
            logger.debug(f"Unexpected error deleting {path}: {e}")
            return FileOutcome(path=path, action="delete_failed", error=str(e))

        logger.info(f"Deleted file: {path}")
        return FileOutcome(path=path, action="deleted")

    def _write(self, target_file: TargetFile) -> FileOutcome:
        path = target_file.path
        try:
            # write_text creates missing parent directories
            self.codecs.write(path, target_file.format, target_file.content, self.filesystem)
        except FilesystemError as e:
            logger.warning(f"Could not create file: {path}")
            logger.debug(f"Write failed for {path}: {e}")
            return FileOutcome(path=path, action="create_failed", error=str(e))
        except Exception as e:  # noqa: BLE001
            logger.warning(f"Could not create file: {path}")
            logger.debug(f"Unexpected error writing {path}: {e}")
            return FileOutcome(path=path, action="create_failed", error=str(e))

        logger.info(f"Created file: {path}")
        return FileOutcome(path=path, action="created")


def transform(
    objects: Sequence[ContentObject],
    decide: Optional[DecisionFunction] = None,
    prior: Iterable[str] = (),
    reconciler: Optional[Reconciler] = None,
) -> Tuple[Sequence[ContentObject], Optional[ReconcileResult]]:
    """Reconcile files for an object set and pass the objects through.

    Returns:
        (objects, result): the unmodified object set, and the reconcile
        result (None when no decision function is configured)
    """
    if decide is None:
        return objects, None

    reconciler = reconciler or Reconciler()
    return objects, reconciler.run(objects, decide, prior)


def describe_failure(failure: ObjectFailure) -> str:
    parts = [f"#{failure.index}"]
    if failure.model_name:
        parts.append(f"model={failure.model_name}")
    if failure.object_id:
        parts.append(f"id={failure.object_id}")
    return " ".join(parts)
