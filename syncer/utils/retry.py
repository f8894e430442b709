"""Bounded retry for single backend operations."""
import time
from typing import Callable, TypeVar

from ..exceptions import BackendError
from .logger import get_logger

log = get_logger(__name__)

T = TypeVar("T")


def call_with_retries(
    func: Callable[[], T],
    retries: int = 0,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    exponential_base: float = 2.0,
) -> T:
    """Run *func*, retrying :class:`BackendError` up to *retries* extra times.

    With ``retries=0`` the first failure propagates unchanged.

    Args:
        func: Zero-argument callable performing one put or delete
        retries: Number of extra attempts after the first failure
        base_delay: Initial delay in seconds
        max_delay: Upper bound on any single delay
        exponential_base: Growth factor between attempts

    Returns:
        Whatever *func* returns
    """
    attempt = 0
    while True:
        try:
            return func()
        except BackendError as e:
            if attempt >= retries:
                raise
            delay = min(base_delay * (exponential_base ** attempt), max_delay)
            attempt += 1
            log.warning("%s (attempt %d/%d), retrying in %.1fs", e, attempt, retries + 1, delay)
            time.sleep(delay)
