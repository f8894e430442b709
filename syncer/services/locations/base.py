"""
Location base class.

A location is one endpoint of a sync pair.  It owns the manifest for its
root and exposes a backend-neutral list/put/delete surface; the concrete
variants only implement the raw backend calls.
"""
from abc import ABC, abstractmethod
from enum import Enum
from typing import Iterator, Optional

from botocore.exceptions import BotoCoreError, ClientError

from ...exceptions import BackendError, ConfigurationError
from ...models import Manifest, ObjectDescriptor
from ...utils.keys import normalize_key
from ...utils.logger import get_logger
from ...utils.retry import call_with_retries

log = get_logger(__name__)

# Native errors either backend (or a source stream being read) can raise
BACKEND_ERRORS = (OSError, BotoCoreError, ClientError)


class LocationKind(Enum):
    FILESYSTEM = "filesystem"
    OBJECT_STORE = "object-store"


class LocationRole(Enum):
    SOURCE = "source"
    DESTINATION = "destination"


class Location(ABC):
    """Abstract base class for sync endpoints.

    Args:
        role: :class:`LocationRole` of this endpoint
        config: :class:`~syncer.utils.config_loader.SyncConfig` for the run
    """

    kind: LocationKind

    def __init__(self, role, config):
        self.role = role
        self.config = config
        self.manifest = Manifest()
        self.destination: Optional["Location"] = None

    # ── Backend primitives ─────────────────────────────────────────────

    @abstractmethod
    def describe(self) -> str:
        """Return the location as a path or ``s3://`` URI."""

    @abstractmethod
    def list_objects(self) -> Iterator[ObjectDescriptor]:
        """Enumerate every object under the root."""

    @abstractmethod
    def _write(self, key: str, descriptor: ObjectDescriptor) -> ObjectDescriptor:
        """Copy *descriptor*'s content to *key* and describe the result."""

    @abstractmethod
    def _remove(self, key: str) -> None:
        """Remove *key* from the backend; a missing key is not an error."""

    # ── Manifest operations ────────────────────────────────────────────

    def pair_with(self, destination):
        """Link this source to the destination it replicates into."""
        if self.role is not LocationRole.SOURCE or destination.role is not LocationRole.DESTINATION:
            raise ConfigurationError(
                f"Cannot pair {self.role.value} {self} with {destination.role.value} {destination}"
            )
        self.destination = destination

    def build_manifest(self) -> Manifest:
        """Replace the manifest with a full listing of the backend.

        Raises:
            BackendError: If the root is missing or the backend unreachable
        """
        log.info("Building manifest for %s %s", self.role.value, self)
        try:
            self.manifest = Manifest(self.list_objects())
        except BACKEND_ERRORS as e:
            raise BackendError("list", None, self, e) from e
        log.info("%s: %d object(s), %d byte(s)", self, len(self.manifest), self.manifest.total_size())
        return self.manifest

    def list_manifest(self):
        """Log every manifest entry, sorted by key."""
        for key in sorted(self.manifest):
            descriptor = self.manifest[key]
            log.info("%s %d %s", key, descriptor.size, descriptor.last_modified.isoformat())

    def put(self, key, descriptor):
        """Write *descriptor*'s content to *key* and record it in the manifest.

        Args:
            key: Relative key at this location
            descriptor: Descriptor whose handle supplies the bytes

        Returns:
            The new local descriptor, or ``None`` in no-op mode

        Raises:
            BackendError: If the write still fails after the configured retries
        """
        key = normalize_key(key)
        if self.config.noop:
            log.info("[noop] would put %s (%d bytes) to %s", key, descriptor.size, self)
            return None

        def attempt():
            try:
                return self._write(key, descriptor)
            except BACKEND_ERRORS as e:
                raise BackendError("put", key, self, e) from e

        written = call_with_retries(attempt, self.config.retries, self.config.retry_delay)
        self.manifest.insert(written)
        log.debug("put %s (%d bytes) to %s", key, written.size, self)
        return written

    def delete(self, key):
        """Remove *key* from the backend and from the manifest.

        Deleting a key that does not exist succeeds on both backends.

        Raises:
            BackendError: If the removal still fails after the configured retries
        """
        key = normalize_key(key)
        if self.config.noop:
            log.info("[noop] would delete %s from %s", key, self)
            return

        def attempt():
            try:
                self._remove(key)
            except BACKEND_ERRORS as e:
                raise BackendError("delete", key, self, e) from e

        call_with_retries(attempt, self.config.retries, self.config.retry_delay)
        self.manifest.remove(key)
        log.debug("deleted %s from %s", key, self)

    def __str__(self):
        return self.describe()

    def __repr__(self):
        return f"{type(self).__name__}({self.describe()!r}, {self.role.value})"
