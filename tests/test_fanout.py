"""Tests for the bounded registry query fan-out."""

import threading
import time

import pytest

from sos_matching.clients.exceptions import UpstreamHTTPError, UpstreamTimeoutError
from sos_matching.logging.context import clear_log_context, get_log_context, log_context
from sos_matching.matching.fanout import gather


@pytest.fixture(autouse=True)
def clean_context():
    clear_log_context()
    yield
    clear_log_context()


def test_empty_task_list():
    assert gather([]) == []


def test_outcomes_keep_input_order_regardless_of_completion():
    def delayed(value, seconds):
        def run():
            time.sleep(seconds)
            return value
        return run

    tasks = [("slow", delayed(1, 0.05)), ("fast", delayed(2, 0)), ("medium", delayed(3, 0.02))]
    outcomes = gather(tasks, max_workers=3)

    assert [o.key for o in outcomes] == ["slow", "fast", "medium"]
    assert [o.value for o in outcomes] == [1, 2, 3]
    assert all(o.ok for o in outcomes)


def test_upstream_failure_becomes_failed_outcome():
    def fail():
        raise UpstreamTimeoutError("timed out", url="http://registry/api/skills")

    outcomes = gather([("medic", lambda: ["a"]), ("swimmer", fail)], max_workers=2)

    assert outcomes[0].ok and outcomes[0].value == ["a"]
    assert not outcomes[1].ok
    assert outcomes[1].value is None
    assert outcomes[1].error_type == "UpstreamTimeoutError"


def test_every_task_fails():
    def fail():
        raise UpstreamHTTPError("HTTP 503", status_code=503)

    outcomes = gather([("a", fail), ("b", fail)], max_workers=2)
    assert [o.ok for o in outcomes] == [False, False]


def test_unexpected_exception_propagates():
    def broken():
        raise KeyError("bug")

    with pytest.raises(KeyError):
        gather([("a", lambda: 1), ("b", broken)], max_workers=2)


def test_concurrency_is_bounded():
    lock = threading.Lock()
    state = {"active": 0, "peak": 0}

    def task():
        with lock:
            state["active"] += 1
            state["peak"] = max(state["peak"], state["active"])
        time.sleep(0.02)
        with lock:
            state["active"] -= 1
        return True

    gather([(str(i), task) for i in range(8)], max_workers=2)
    assert state["peak"] <= 2


def test_single_worker_runs_sequentially_in_caller_thread():
    caller = threading.get_ident()
    outcomes = gather([("a", threading.get_ident), ("b", threading.get_ident)], max_workers=1)
    assert [o.value for o in outcomes] == [caller, caller]


def test_log_context_follows_tasks_into_workers():
    with log_context(request_id="sos-1", run_id="ab12"):
        outcomes = gather([("a", get_log_context), ("b", get_log_context)], max_workers=2)

    for outcome in outcomes:
        assert outcome.value == {"request_id": "sos-1", "run_id": "ab12"}
