"""
Sync services for Syncer.

- locations/ - filesystem and S3 endpoints owning their manifests
- reconcile  - one-time diff and apply between two manifests
- watcher    - continuous replication of source change events
"""
from .locations import FilesystemLocation, S3Location, Location, LocationKind, LocationRole
from .reconcile import ReconcileEngine, ReconcilePlan, ReconcileReport, compute_plan
from .watcher import ChangeWatcher, ChangeEvent, EventOp, WatchSubscription, WatchdogSubscription

__all__ = [
    'Location',
    'LocationKind',
    'LocationRole',
    'FilesystemLocation',
    'S3Location',
    'ReconcileEngine',
    'ReconcilePlan',
    'ReconcileReport',
    'compute_plan',
    'ChangeWatcher',
    'ChangeEvent',
    'EventOp',
    'WatchSubscription',
    'WatchdogSubscription',
]
