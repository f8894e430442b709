"""
Filesystem location: a local directory tree.
"""
import os
import shutil
import tempfile

from ...models import ObjectDescriptor
from ...utils.keys import join_path, key_from_path
from ...utils.logger import get_logger
from .base import Location, LocationKind

log = get_logger(__name__)


def _raise(error):
    raise error


class FilesystemLocation(Location):
    """Directory root on local disk.

    Only files become manifest entries; directories exist implicitly
    through the keys below them.

    Args:
        root: Directory path
        role: :class:`LocationRole`
        config: :class:`SyncConfig`
    """

    kind = LocationKind.FILESYSTEM

    def __init__(self, root, role, config):
        super().__init__(role, config)
        self.root = os.path.abspath(root)

    def describe(self):
        return self.root

    def path_for(self, key):
        """Absolute path of *key* under this root."""
        return join_path(self.root, key)

    def key_for(self, path):
        """Relative key of an absolute *path* under this root."""
        return key_from_path(self.root, path)

    def describe_path(self, path):
        """Build a descriptor for the file currently at *path*."""
        return ObjectDescriptor.from_path(self.key_for(path), path)

    def list_objects(self):
        for dirpath, dirnames, filenames in os.walk(self.root, onerror=_raise):
            dirnames.sort()
            for name in sorted(filenames):
                path = os.path.join(dirpath, name)
                if not os.path.isfile(path):
                    log.debug("Skipping non-regular file %s", path)
                    continue
                try:
                    yield self.describe_path(path)
                except FileNotFoundError:
                    log.warning("Skipping %s: removed while listing", path)

    def subdirectories(self):
        """Yield every directory below the root, parents first."""
        for dirpath, dirnames, _ in os.walk(self.root, onerror=_raise):
            dirnames.sort()
            for name in dirnames:
                yield os.path.join(dirpath, name)

    def _write(self, key, descriptor):
        target = self.path_for(key)
        directory = os.path.dirname(target)
        os.makedirs(directory, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(prefix=".syncer-", dir=directory)
        try:
            with os.fdopen(fd, 'wb') as out, descriptor.open() as stream:
                shutil.copyfileobj(stream, out)
                out.flush()
                os.fsync(out.fileno())
            os.replace(tmp_path, target)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

        return ObjectDescriptor.from_path(key, target)

    def _remove(self, key):
        try:
            os.remove(self.path_for(key))
        except FileNotFoundError:
            log.debug("%s already absent from %s", key, self)
