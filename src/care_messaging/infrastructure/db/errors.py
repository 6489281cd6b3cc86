from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import InterfaceError, OperationalError

from care_messaging.application.exceptions import StorageUnavailableError


@contextmanager
def storage_errors() -> Iterator[None]:
    """Surface driver connectivity failures as ``StorageUnavailableError``."""
    try:
        yield
    except (OperationalError, InterfaceError) as exc:
        raise StorageUnavailableError(f"storage unavailable: {exc.orig or exc}") from exc
