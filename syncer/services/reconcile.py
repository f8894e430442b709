"""
One-time reconciliation between a source and a destination manifest.

The plan is a pure function of the two manifests; execution walks the
plan in key order, calling ``put``/``delete`` on the destination one key
at a time.  A failure on one key never undoes keys already applied.
"""
from dataclasses import dataclass, field
from typing import List

from ..exceptions import BackendError, ReconcileError
from ..utils.logger import get_logger

log = get_logger(__name__)


@dataclass
class ReconcilePlan:
    """Keys to put, keys to delete, and keys already in sync (all sorted)."""

    to_put: List[str] = field(default_factory=list)
    to_delete: List[str] = field(default_factory=list)
    unchanged: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.to_put and not self.to_delete


@dataclass
class ReconcileReport:
    """Outcome counts for one executed plan."""

    put: int = 0
    deleted: int = 0
    unchanged: int = 0
    failures: List[BackendError] = field(default_factory=list)


def needs_put(source_descriptor, dest_descriptor, compare="size") -> bool:
    """Decide whether an existing destination object must be overwritten.

    Size is always compared.  With ``compare='size-mtime'`` a newer source
    also triggers a put; callers only pass that mode when both descriptors
    come from the same backend kind.
    """
    if source_descriptor.size != dest_descriptor.size:
        return True
    if compare == "size-mtime":
        return source_descriptor.last_modified > dest_descriptor.last_modified
    return False


def compute_plan(source_manifest, dest_manifest, delete=False, compare="size") -> ReconcilePlan:
    """Diff two manifests into a :class:`ReconcilePlan`.

    Args:
        source_manifest: Manifest (or key to descriptor mapping) of the source
        dest_manifest: Manifest (or mapping) of the destination
        delete: Also plan deletes for destination-only keys
        compare: ``size`` or ``size-mtime``

    Returns:
        ReconcilePlan
    """
    plan = ReconcilePlan()

    for key in sorted(source_manifest.keys()):
        dest_descriptor = dest_manifest.get(key)
        if dest_descriptor is None or needs_put(source_manifest[key], dest_descriptor, compare):
            plan.to_put.append(key)
        else:
            plan.unchanged.append(key)

    if delete:
        plan.to_delete = sorted(key for key in dest_manifest.keys() if key not in source_manifest)

    return plan


class ReconcileEngine:
    """Computes and applies the startup diff between two locations.

    Args:
        source: Source :class:`Location` with a built manifest
        destination: Destination :class:`Location` with a built manifest
        config: :class:`SyncConfig` (uses ``delete``, ``compare``, ``on_error``)
    """

    def __init__(self, source, destination, config):
        self.source = source
        self.destination = destination
        self.config = config

    def effective_compare(self) -> str:
        if self.config.compare == "size-mtime" and self.source.kind is not self.destination.kind:
            log.warning(
                "Timestamps are not comparable between %s and %s; comparing by size only",
                self.source.kind.value, self.destination.kind.value,
            )
            return "size"
        return self.config.compare

    def plan(self) -> ReconcilePlan:
        return compute_plan(
            self.source.manifest,
            self.destination.manifest,
            delete=self.config.delete,
            compare=self.effective_compare(),
        )

    def run(self) -> ReconcileReport:
        """Compute and execute the plan.

        Returns:
            ReconcileReport

        Raises:
            BackendError: First failure when ``on_error='abort'``
            ReconcileError: After the pass when ``on_error='continue'``
                and any key failed
        """
        plan = self.plan()
        report = ReconcileReport(unchanged=len(plan.unchanged))
        log.info(
            "Reconciling %s -> %s: %d to put, %d to delete, %d unchanged",
            self.source, self.destination, len(plan.to_put), len(plan.to_delete), len(plan.unchanged),
        )

        for key in plan.to_put:
            if key in self.destination.manifest:
                log.info("pushing mismatched %s to destination.", key)
            else:
                log.info("pushing missing %s to destination.", key)
            if self._apply(report, self.destination.put, key, self.source.manifest[key]):
                report.put += 1

        for key in plan.to_delete:
            log.info("deleting %s from destination.", key)
            if self._apply(report, self.destination.delete, key):
                report.deleted += 1

        if report.failures:
            raise ReconcileError(report.failures)

        log.info("Reconcile complete: %d put, %d deleted", report.put, report.deleted)
        return report

    def _apply(self, report, operation, *args) -> bool:
        try:
            operation(*args)
        except BackendError as e:
            if self.config.on_error == "abort":
                raise
            log.error("%s", e)
            report.failures.append(e)
            return False
        return True
