from __future__ import annotations

import pytest

from days_without.errors import LoadError, SaveError
from days_without.storage import RESTART_HISTORY_PREFIX


class FlakyStorage:
    """Dict-backed storage whose saves and loads can be made to fail."""

    def __init__(self, fail_prefix: str | None = None) -> None:
        self.data: dict[str, bytes] = {}
        self.fail_saves = False
        self.fail_loads = False
        self.fail_prefix = fail_prefix

    def _should_fail(self, key: str) -> bool:
        if self.fail_prefix is not None:
            return self.fail_saves and key.startswith(self.fail_prefix)
        return self.fail_saves

    def save(self, key: str, data: bytes) -> None:
        if self._should_fail(key):
            raise SaveError(OSError("disk full"))
        self.data[key] = data

    def load(self, key: str) -> bytes | None:
        if self.fail_loads:
            raise LoadError(OSError("database is locked"))
        return self.data.get(key)

    def clear(self, key: str) -> None:
        if self._should_fail(key):
            raise SaveError(OSError("disk full"))
        self.data.pop(key, None)


@pytest.fixture
def flaky_storage() -> FlakyStorage:
    return FlakyStorage()


@pytest.fixture
def history_failing_storage() -> FlakyStorage:
    return FlakyStorage(fail_prefix=RESTART_HISTORY_PREFIX)
