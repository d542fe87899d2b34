"""Tests for logging context propagation."""

import threading

import pytest

from sos_matching.logging.context import (
    clear_log_context,
    get_log_context,
    log_context,
    pop_log_context,
    push_log_context,
)


@pytest.fixture(autouse=True)
def clean_context():
    """Clear logging context before and after each test."""
    clear_log_context()
    yield
    clear_log_context()


def test_empty_context():
    assert get_log_context() == {}


def test_push_and_pop_single_field():
    token = push_log_context(request_id="sos-1")
    assert get_log_context() == {"request_id": "sos-1"}
    pop_log_context(token)
    assert get_log_context() == {}


def test_nested_pushes_restore_in_order():
    """Each pop restores exactly the layer below it."""
    token1 = push_log_context(request_id="sos-1")
    token2 = push_log_context(run_id="ab12")
    token3 = push_log_context(match_id="match-1")

    assert get_log_context() == {"request_id": "sos-1", "run_id": "ab12", "match_id": "match-1"}

    pop_log_context(token3)
    assert get_log_context() == {"request_id": "sos-1", "run_id": "ab12"}
    pop_log_context(token2)
    assert get_log_context() == {"request_id": "sos-1"}
    pop_log_context(token1)
    assert get_log_context() == {}


def test_inner_push_overrides_outer_value():
    with log_context(request_id="outer"):
        with log_context(request_id="inner"):
            assert get_log_context()["request_id"] == "inner"
        assert get_log_context()["request_id"] == "outer"


def test_log_context_manager_yields_active_context():
    with log_context(request_id="sos-1", run_id="ab12") as ctx:
        assert ctx == {"request_id": "sos-1", "run_id": "ab12"}
    assert get_log_context() == {}


def test_log_context_restored_after_exception():
    with pytest.raises(RuntimeError):
        with log_context(request_id="sos-1"):
            raise RuntimeError("boom")
    assert get_log_context() == {}


def test_get_log_context_returns_copy():
    with log_context(request_id="sos-1"):
        ctx = get_log_context()
        ctx["request_id"] = "mutated"
        assert get_log_context()["request_id"] == "sos-1"


def test_context_not_visible_in_plain_thread():
    """A new thread starts with an empty context unless it is copied explicitly."""
    seen = {}

    def worker():
        seen.update(get_log_context())

    with log_context(request_id="sos-1"):
        thread = threading.Thread(target=worker)
        thread.start()
        thread.join()

    assert seen == {}
