import threading

from conftest import ARMED_BIT, make_hb
from services.safety_manager import (
    attach_link_failsafe,
    get_failsafe_reason,
    is_failsafe_triggered,
    reset_failsafe,
    trigger_failsafe,
    wait_for_failsafe,
)


def test_first_reason_wins():
    trigger_failsafe("first")
    trigger_failsafe("second")

    assert is_failsafe_triggered() is True
    assert get_failsafe_reason() == "first"

    reset_failsafe()
    assert is_failsafe_triggered() is False
    assert get_failsafe_reason() == ""


def test_wait_for_failsafe_times_out_then_wakes():
    assert wait_for_failsafe(0.01) is False

    threading.Timer(0.01, trigger_failsafe, args=("later",)).start()
    assert wait_for_failsafe(2.0) is True


def test_loss_of_never_armed_vehicle_only_warns(bus, monitor, timers, caplog):
    attach_link_failsafe(bus, monitor)
    monitor.submit_heartbeat(make_hb(sys_id=5, base_mode=0))
    monitor.process_pending()

    timers.advance(30.0)
    monitor.process_pending()

    assert is_failsafe_triggered() is False
    assert "never armed" in caplog.text


def test_loss_of_armed_vehicle_triggers_failsafe(bus, monitor, timers):
    attach_link_failsafe(bus, monitor)
    monitor.submit_heartbeat(make_hb(sys_id=5, base_mode=ARMED_BIT))
    monitor.process_pending()

    timers.advance(30.0)
    monitor.process_pending()

    assert is_failsafe_triggered() is True
    assert "sysId 5" in get_failsafe_reason()


def test_failsafe_latches_after_disarm_too(bus, monitor):
    attach_link_failsafe(bus, monitor)
    for base_mode in (ARMED_BIT, 0):
        monitor.submit_heartbeat(make_hb(base_mode=base_mode))
    monitor.force_lost_heartbeat()
    monitor.process_pending()

    assert is_failsafe_triggered() is True
