import threading

import pytest

from conftest import make_hb
from services.event_bus import EventBus
from services.heartbeat_events import HeartbeatFound, HeartbeatLost, SystemStatusChanged
from services.heartbeat_monitor import HeartbeatMonitor, MonitorHooks, start_heartbeat_monitor


def test_worker_thread_detects_loss_with_real_timers():
    bus = EventBus()
    found, lost = threading.Event(), threading.Event()
    events = []
    bus.subscribe_all(events.append)
    bus.subscribe(HeartbeatFound, lambda e: found.set())
    bus.subscribe(HeartbeatLost, lambda e: lost.set())

    monitor = start_heartbeat_monitor(bus, timeout_seconds=0.1)
    try:
        monitor.submit_heartbeat(make_hb(sys_id=8))
        assert found.wait(2.0)
        assert lost.wait(2.0)
    finally:
        monitor.stop()

    assert events[-2:] == [HeartbeatLost(8), SystemStatusChanged(None)]
    assert monitor.has_heartbeat is False


def test_process_pending_refused_while_thread_runs():
    monitor = start_heartbeat_monitor(EventBus(), timeout_seconds=5.0)
    try:
        with pytest.raises(RuntimeError):
            monitor.process_pending()
    finally:
        monitor.stop()


def test_stop_handles_queued_inputs_first():
    bus = EventBus()
    events = []
    bus.subscribe_all(events.append)
    monitor = start_heartbeat_monitor(bus, timeout_seconds=5.0)

    monitor.submit_heartbeat(make_hb(sys_id=2))
    monitor.force_lost_heartbeat()
    monitor.stop()

    assert events == [
        HeartbeatFound(2),
        SystemStatusChanged(3),
        HeartbeatLost(2),
        SystemStatusChanged(None),
    ]
    assert monitor.start().is_alive()
    monitor.stop()


def test_stop_timeout_keeps_single_consumer():
    release = threading.Event()
    entered = threading.Event()

    def slow_found(sys_id):
        entered.set()
        release.wait(5.0)

    monitor = HeartbeatMonitor(EventBus(), timeout_seconds=5.0, hooks=MonitorHooks(on_heartbeat_found=slow_found))
    worker = monitor.start()
    monitor.submit_heartbeat(make_hb(sys_id=4))
    assert entered.wait(2.0)

    monitor.stop(join_timeout=0.1)
    assert worker.is_alive()
    with pytest.raises(RuntimeError):
        monitor.process_pending()
    # a second start() must not spawn a competing worker
    assert monitor.start() is worker

    release.set()
    worker.join(2.0)
    assert not worker.is_alive()
    assert monitor.process_pending() == 0

    monitor.stop()
    assert monitor.has_heartbeat is True
