import pytest

from nodezero.utils.retry import NotReady, RetryError, retry


def test_retry_returns_first_success():
    attempts = []
    sleeps = []

    @retry(retries=5, delay=2, sleep=sleeps.append)
    def poll():
        attempts.append(1)
        if len(attempts) < 3:
            raise NotReady("not yet")
        return "live"

    assert poll() == "live"
    assert len(attempts) == 3
    assert sleeps == [2, 2]


def test_retry_gives_up_and_chains_last_error():
    seen = []

    @retry(retries=3, delay=1, sleep=lambda s: None, on_retry=lambda n, e: seen.append(n))
    def poll():
        raise NotReady("still down")

    with pytest.raises(RetryError) as excinfo:
        poll()
    assert seen == [1, 2, 3]
    assert isinstance(excinfo.value.__cause__, NotReady)


def test_retry_does_not_swallow_other_errors():
    @retry(retries=3, delay=0, sleep=lambda s: None)
    def poll():
        raise KeyError("boom")

    with pytest.raises(KeyError):
        poll()


def test_retry_requires_positive_attempts():
    with pytest.raises(ValueError):
        retry(retries=0, delay=1)
