# tests/unit/test_scheduler.py: Unit tests for rotation passes and the scheduler loop.

import logging
import random
import threading
import time
from collections import Counter
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from bgrotate.interrupt import Interrupt, InterruptChannel
from bgrotate.pool import DaemonState, WorkspacePool
from bgrotate.scheduler import RotationScheduler, SchedulerState
from bgrotate.util.errors import ExternalCallError

class DictLister:
    """Lister fake returning fixed images per directory and counting calls."""

    def __init__(self, images):
        self.images = images
        self.calls = Counter()

    def list_images(self, dirs):
        result = []
        for d in dirs:
            self.calls[d.name] += 1
            outcome = self.images[d.name]
            if isinstance(outcome, Exception):
                raise outcome
            result.extend(outcome)
        return result

class RecordingChannel(InterruptChannel):
    """Real channel that records how each wait ended and how long it took."""

    def __init__(self):
        super().__init__()
        self.wakes = []

    def wait(self, timeout):
        started = time.monotonic()
        reason = super().wait(timeout)
        self.wakes.append((reason, time.monotonic() - started))
        return reason

def make_scheduler(images, channel=None, setter=None, interval=3600):
    lister = DictLister(images)
    state = DaemonState([
        WorkspacePool(index + 1, [Path("/images") / name], lister)
        for index, name in enumerate(images)
    ])
    scheduler = RotationScheduler(
        state,
        setter or MagicMock(),
        channel or InterruptChannel(),
        interval,
        rng=random.Random(42),
    )
    return scheduler, lister

def test_three_passes_show_each_image_once_then_refill():
    """One workspace with [a, b, c]: three passes use each once, the fourth refills."""
    scheduler, lister = make_scheduler({"ws": ["a", "b", "c"]})

    shown = [scheduler.run_pass()[1] for _ in range(3)]

    assert sorted(shown) == ["a", "b", "c"]
    assert lister.calls["ws"] == 1

    fourth = scheduler.run_pass()[1]
    assert fourth in {"a", "b", "c"}
    assert lister.calls["ws"] == 2
    assert len(scheduler.state.pools[1]) == 2

def test_no_repeat_until_exhaustion():
    images = [f"img{i:02}.jpg" for i in range(10)]
    scheduler, _ = make_scheduler({"ws": images})

    for _ in range(3):
        cycle = [scheduler.run_pass()[1] for _ in range(10)]
        assert sorted(cycle) == images

def test_setter_receives_workspace_and_image():
    setter = MagicMock()
    scheduler, _ = make_scheduler({"one": ["x.jpg"], "two": ["y.jpg"]}, setter=setter)

    applied = scheduler.run_pass()

    assert applied == {1: "x.jpg", 2: "y.jpg"}
    assert [c.args for c in setter.set.call_args_list] == [(1, "x.jpg"), (2, "y.jpg")]

def test_empty_workspace_is_deactivated_after_one_attempt(caplog):
    """A workspace whose lister is always empty is tried once and then dropped."""
    caplog.set_level(logging.INFO, logger="bgrotate")
    setter = MagicMock()
    scheduler, lister = make_scheduler({"empty": [], "full": ["a", "b"]}, setter=setter)

    scheduler.run_pass()
    assert scheduler.state.active_workspaces() == [2]
    assert "No backgrounds for workspace 1" in caplog.text

    for _ in range(3):
        scheduler.run_pass()

    assert lister.calls["empty"] == 1
    assert all(c.args[0] == 2 for c in setter.set.call_args_list)
    assert setter.set.call_count == 4

def test_setter_failure_does_not_block_other_workspaces(caplog):
    setter = MagicMock()
    setter.set.side_effect = [ExternalCallError("bgswitch exited 1"), None]
    scheduler, _ = make_scheduler({"one": ["a"], "two": ["b"]}, setter=setter)

    applied = scheduler.run_pass()

    assert applied == {2: "b"}
    assert scheduler.state.active_workspaces() == [1, 2]
    assert "bgswitch exited 1" in caplog.text

def test_lister_failure_abandons_workspace_for_this_pass_only():
    """A failing listing is not treated as an empty workspace."""
    scheduler, lister = make_scheduler({"flaky": ExternalCallError("query failed"), "ok": ["a", "b"]})

    applied = scheduler.run_pass()
    assert list(applied) == [2]
    assert scheduler.state.active_workspaces() == [1, 2]

    lister.images["flaky"] = ["z"]
    applied = scheduler.run_pass()
    assert applied[1] == "z"

def test_unexpected_error_is_contained(caplog):
    setter = MagicMock()
    setter.set.side_effect = [ValueError("boom"), None]
    scheduler, _ = make_scheduler({"one": ["a"], "two": ["b"]}, setter=setter)

    applied = scheduler.run_pass()

    assert applied == {2: "b"}
    assert "Unexpected error rotating workspace 1" in caplog.text

def test_shutdown_mid_pass_skips_remaining_workspaces():
    channel = InterruptChannel()
    setter = MagicMock()
    setter.set.side_effect = lambda ws, image: channel.request_shutdown()
    scheduler, _ = make_scheduler({"one": ["a"], "two": ["b"]}, channel=channel, setter=setter)

    scheduler.run()

    assert setter.set.call_count == 1
    assert scheduler.phase is SchedulerState.SHUTTING_DOWN

def test_advance_during_pass_is_deferred_to_the_sleep():
    """An advance arriving mid-pass makes the following sleep return at once."""
    channel = RecordingChannel()
    setter = MagicMock()

    def on_set(ws, image):
        if setter.set.call_count == 1:
            channel.request_advance()
        elif setter.set.call_count == 2:
            channel.request_shutdown()

    setter.set.side_effect = on_set
    scheduler, _ = make_scheduler({"ws": ["a", "b"]}, channel=channel, setter=setter)

    scheduler.run()

    assert scheduler.passes == 2
    assert channel.wakes[0][0] is Interrupt.ADVANCE
    assert channel.wakes[0][1] < 1

def test_advance_during_sleep_starts_next_pass_early():
    """Advance while sleeping wakes the scheduler long before the interval ends."""
    channel = RecordingChannel()
    setter = MagicMock()
    setter.set.side_effect = lambda ws, image: (
        channel.request_shutdown() if setter.set.call_count == 2 else None
    )
    scheduler, _ = make_scheduler({"ws": ["a", "b"]}, channel=channel, setter=setter, interval=30)

    timer = threading.Timer(0.1, channel.request_advance)
    timer.start()
    started = time.monotonic()
    scheduler.run()
    timer.join()

    assert scheduler.passes == 2
    assert channel.wakes[0][0] is Interrupt.ADVANCE
    assert channel.wakes[0][1] < 30
    assert time.monotonic() - started < 10

def test_timeout_starts_next_pass():
    channel = MagicMock()
    channel.shutdown_requested = False
    channel.wait.side_effect = [Interrupt.TIMEOUT, Interrupt.TIMEOUT, Interrupt.SHUTDOWN]
    scheduler, _ = make_scheduler({"ws": ["a", "b", "c"]}, channel=channel, interval=900)

    scheduler.run()

    assert scheduler.passes == 3
    assert [c.args for c in channel.wait.call_args_list] == [(900,), (900,), (900,)]

def test_shutdown_during_sleep_ends_without_another_pass():
    channel = MagicMock()
    channel.shutdown_requested = False
    channel.wait.return_value = Interrupt.SHUTDOWN
    setter = MagicMock()
    scheduler, _ = make_scheduler({"ws": ["a", "b"]}, channel=channel, setter=setter)

    assert scheduler.phase is SchedulerState.IDLE
    scheduler.run()

    assert scheduler.passes == 1
    assert setter.set.call_count == 1
    assert scheduler.phase is SchedulerState.SHUTTING_DOWN

def test_wait_outcome_is_logged(caplog):
    caplog.set_level(logging.DEBUG, logger="bgrotate")
    channel = MagicMock()
    channel.shutdown_requested = False
    channel.wait.side_effect = [Interrupt.TIMEOUT, Interrupt.ADVANCE, Interrupt.SHUTDOWN]
    scheduler, _ = make_scheduler({"ws": ["a", "b", "c"]}, channel=channel, interval=900)

    scheduler.run()

    assert "Interval of 900 seconds elapsed" in caplog.text
    assert "Advance requested" in caplog.text
