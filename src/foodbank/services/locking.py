"""Advisory lock that keeps allocation runs against the shared workbook serialized."""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path

from ..config import settings

logger = logging.getLogger(__name__)

POLL_INTERVAL_SECONDS = 0.05
LOCK_FILE_NAME = "allocation.lock"


def default_lock_path() -> Path:
    return settings.data_root / LOCK_FILE_NAME


class LockUnavailableError(RuntimeError):
    """Raised when another allocation run holds the lock."""


class RunLock:
    """Cross-process lock backed by an exclusively created lock file.

    ``try_acquire`` never queues: it retries until ``timeout_ms`` elapses and
    then reports failure so the caller can abort.
    """

    def __init__(self, path: Path | None = None, *, timeout_ms: int | None = None) -> None:
        self.path = path or default_lock_path()
        self.timeout_ms = settings.lock_timeout_ms if timeout_ms is None else timeout_ms
        self._held = False

    @property
    def held(self) -> bool:
        return self._held

    def try_acquire(self, timeout_ms: int | None = None) -> bool:
        if self._held:
            return True
        timeout_ms = self.timeout_ms if timeout_ms is None else timeout_ms
        deadline = time.monotonic() + timeout_ms / 1000
        self.path.parent.mkdir(parents=True, exist_ok=True)
        while True:
            try:
                fd = os.open(self.path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
            except FileExistsError:
                if time.monotonic() >= deadline:
                    logger.warning(f"Could not acquire allocation lock at {self.path} within {timeout_ms} ms")
                    return False
                time.sleep(POLL_INTERVAL_SECONDS)
                continue
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(str(os.getpid()))
            self._held = True
            return True

    def release(self) -> None:
        if not self._held:
            return
        try:
            self.path.unlink()
        except FileNotFoundError:
            logger.warning(f"Allocation lock file {self.path} was already removed")
        self._held = False

    def __enter__(self) -> "RunLock":
        if not self.try_acquire():
            raise LockUnavailableError("Another allocation run is in progress. Try again once it finishes.")
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
