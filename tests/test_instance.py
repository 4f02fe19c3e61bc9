from __future__ import annotations

import threading
import time

import pytest

from core.instance import (
    InstanceArbiter,
    InstanceRole,
    WindowReadyProbe,
    decode_batch,
    encode_batch,
    wait_for_ready,
)
from core.process_mode import ProcessMode


@pytest.fixture
def arbiters(qapp, tmp_path, instance_id):
    created = []

    def _make():
        arbiter = InstanceArbiter(instance_id=instance_id, lock_dir=tmp_path)
        created.append(arbiter)
        return arbiter

    yield _make
    for arbiter in reversed(created):
        arbiter.release()


def test_batch_encoding():
    assert decode_batch(encode_batch(["foo.png", "ünïcode"]).rstrip(b"\n")) == ["foo.png", "ünïcode"]
    assert decode_batch(b"not json") is None
    assert decode_batch(b'{"args": [1]}') is None
    assert decode_batch(b'["foo"]') is None


def test_wait_for_ready_polls_until_true():
    start = time.monotonic()
    assert wait_for_ready(lambda: time.monotonic() - start > 0.05, timeout_ms=1000, poll_ms=10)


def test_wait_for_ready_times_out():
    start = time.monotonic()
    assert wait_for_ready(lambda: False, timeout_ms=50, poll_ms=10) is False
    assert time.monotonic() - start >= 0.05


def test_first_process_is_primary_second_is_secondary(arbiters):
    primary = arbiters()
    assert primary.acquire(ProcessMode()) is InstanceRole.PRIMARY
    assert primary.holds_lock

    secondary = arbiters()
    assert secondary.acquire(ProcessMode()) is InstanceRole.SECONDARY
    assert not secondary.holds_lock


def test_role_is_decided_once(arbiters):
    arbiter = arbiters()
    assert arbiter.acquire(ProcessMode()) is InstanceRole.PRIMARY
    assert arbiter.acquire(ProcessMode(multi_instance=True)) is InstanceRole.PRIMARY
    assert arbiter.holds_lock


def test_multi_instance_bypasses_lock(arbiters):
    primary = arbiters()
    primary.acquire(ProcessMode())

    parallel = arbiters()
    assert parallel.acquire(ProcessMode.parse(["--multi"])) is InstanceRole.PRIMARY
    assert not parallel.holds_lock
    # No endpoint is opened for a multi-instance run
    assert parallel.listen(lambda args: None, lambda: True) is False


def test_lock_is_free_again_after_release(arbiters):
    first = arbiters()
    first.acquire(ProcessMode())
    first.release()

    second = arbiters()
    assert second.acquire(ProcessMode()) is InstanceRole.PRIMARY


def test_secondary_forwards_arguments_to_primary(arbiters):
    primary = arbiters()
    primary.acquire(ProcessMode())

    received = []
    delivered = threading.Event()

    def on_arguments(args):
        received.append(args)
        delivered.set()

    assert primary.listen(on_arguments, ready_probe=lambda: True)

    secondary = arbiters()
    mode = ProcessMode.parse(["foo.png"])
    assert secondary.acquire(mode) is InstanceRole.SECONDARY
    assert secondary.forward(mode.args) is True

    assert delivered.wait(5)
    assert received == [["foo.png"]]


def test_forwarding_waits_for_ready(arbiters):
    primary = arbiters()
    primary.acquire(ProcessMode())

    ready = threading.Event()
    delivered = threading.Event()
    primary.listen(lambda args: delivered.set(), ready_probe=ready.is_set,
                   ready_timeout_ms=5000, ready_poll_ms=10)

    secondary = arbiters()
    secondary.acquire(ProcessMode())
    assert secondary.forward([])

    assert not delivered.wait(0.2)
    ready.set()
    assert delivered.wait(5)


def test_forwarding_dropped_when_never_ready(arbiters, log_messages):
    primary = arbiters()
    primary.acquire(ProcessMode())

    delivered = threading.Event()
    primary.listen(lambda args: delivered.set(), ready_probe=lambda: False,
                   ready_timeout_ms=100, ready_poll_ms=10)

    secondary = arbiters()
    secondary.acquire(ProcessMode())
    assert secondary.forward(["late.png"])

    assert not delivered.wait(0.5)
    assert any("dropping" in m for m in log_messages)


def test_forward_without_primary_fails_quietly(arbiters):
    lonely = arbiters()
    assert lonely.forward(["foo.png"], timeout_ms=200) is False


class _Window:
    def __init__(self, is_ready=False):
        self.is_ready = is_ready


def test_window_ready_probe():
    probe = WindowReadyProbe()
    assert probe() is False
    probe.window = _Window()
    assert probe() is False
    probe.window.is_ready = True
    assert probe() is True


def test_batch_sent_before_window_exists_is_delivered(arbiters):
    primary = arbiters()
    primary.acquire(ProcessMode())

    window_ready = WindowReadyProbe()
    received = []
    delivered = threading.Event()

    def on_arguments(args):
        received.append(args)
        delivered.set()

    assert primary.listen(on_arguments, ready_probe=window_ready, ready_timeout_ms=5000, ready_poll_ms=10)

    secondary = arbiters()
    secondary.acquire(ProcessMode())
    assert secondary.forward(["startup.png"])

    assert not delivered.wait(0.2)
    window_ready.window = _Window(is_ready=True)
    assert delivered.wait(5)
    assert received == [["startup.png"]]


def test_forward_waits_for_primary_to_start_listening(arbiters):
    primary = arbiters()
    primary.acquire(ProcessMode())

    secondary = arbiters()
    secondary.acquire(ProcessMode())
    results = []
    sender = threading.Thread(target=lambda: results.append(secondary.forward(["early.png"], timeout_ms=3000)))
    sender.start()
    time.sleep(0.2)

    received = []
    delivered = threading.Event()

    def on_arguments(args):
        received.append(args)
        delivered.set()

    assert primary.listen(on_arguments, ready_probe=lambda: True)
    sender.join(5)

    assert results == [True]
    assert delivered.wait(5)
    assert received == [["early.png"]]
