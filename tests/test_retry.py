from __future__ import annotations

import pytest

from resurrect.errors import ProviderError, ProviderTransientError
from resurrect.services.retry import call_with_retry


class Flaky:
    def __init__(self, failures: int, error: Exception | None = None) -> None:
        self.failures = failures
        self.error = error or ProviderTransientError("throttled")
        self.calls = 0

    async def __call__(self, value: str) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return value


async def test_retries_transient_errors_until_success() -> None:
    operation = Flaky(failures=2)

    result = await call_with_retry(operation, "ok", attempts=3, base_delay=0)

    assert result == "ok"
    assert operation.calls == 3


async def test_gives_up_after_bounded_attempts() -> None:
    operation = Flaky(failures=5)

    with pytest.raises(ProviderTransientError):
        await call_with_retry(operation, "ok", attempts=3, base_delay=0)
    assert operation.calls == 3


async def test_unrecoverable_errors_are_not_retried() -> None:
    operation = Flaky(failures=1, error=ProviderError("gone"))

    with pytest.raises(ProviderError):
        await call_with_retry(operation, "ok", attempts=3, base_delay=0)
    assert operation.calls == 1
