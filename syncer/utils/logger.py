"""Console logging for Syncer.

Everything the sync loop reports (manifest listings, reconcile decisions,
replicated events) goes through loggers below the ``syncer`` namespace.
Levels map onto the CLI flags:

=============  =========  ==========================================
flag           level      shows
=============  =========  ==========================================
``--quiet``    WARNING    failures and no-op warnings only
(none)         INFO       manifests, pushes and deletes
``--verbose``  DEBUG      every raw event, tagged with its module
=============  =========  ==========================================

Usage::

    from syncer.utils.logger import get_logger

    log = get_logger(__name__)
    log.info("pushing missing %s to destination.", key)
"""
import logging
import sys

from colorama import Fore, Style

__all__ = ["get_logger", "setup_logging"]

_ROOT_LOGGER_NAME = "syncer"

_LEVEL_COLOURS = {
    logging.DEBUG: Fore.WHITE,
    logging.INFO: Fore.CYAN,
    logging.WARNING: Fore.YELLOW,
    logging.ERROR: Fore.RED,
    logging.CRITICAL: Fore.RED + Style.BRIGHT,
}

_PLAIN_FORMAT = "%(message)s"
_VERBOSE_FORMAT = "%(short_name)s: %(message)s"

_configured = False


class ColouredFormatter(logging.Formatter):
    """Prefix each record with a coloured level tag.

    With the verbose format the emitting module is shown without the
    ``syncer.`` prefix, e.g. ``services.watcher: event created on ...``.
    """

    def format(self, record: logging.LogRecord) -> str:
        name = record.name
        if name.startswith(_ROOT_LOGGER_NAME + "."):
            name = name[len(_ROOT_LOGGER_NAME) + 1:]
        record.short_name = name
        colour = _LEVEL_COLOURS.get(record.levelno, "")
        return f"{colour}[{record.levelname}]{Style.RESET_ALL} {super().format(record)}"


def setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure the ``syncer`` logger for a CLI run.

    Safe to call repeatedly; the single stderr handler is reused and only
    its level and format change.

    Args:
        verbose: Log at ``DEBUG`` and tag records with their module.
        quiet: Log at ``WARNING``; wins over *verbose*.
    """
    global _configured  # noqa: PLW0603

    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO
    fmt = _VERBOSE_FORMAT if verbose and not quiet else _PLAIN_FORMAT

    root = logging.getLogger(_ROOT_LOGGER_NAME)
    root.setLevel(level)

    if not root.handlers:
        root.addHandler(logging.StreamHandler(sys.stderr))
    for handler in root.handlers:
        handler.setLevel(level)
        handler.setFormatter(ColouredFormatter(fmt))

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``syncer`` namespace.

    Applies the default ``INFO`` setup on first use if the CLI has not
    configured logging yet.
    """
    if not _configured:
        setup_logging()

    if not name.startswith(_ROOT_LOGGER_NAME):
        name = f"{_ROOT_LOGGER_NAME}.{name}"

    return logging.getLogger(name)
