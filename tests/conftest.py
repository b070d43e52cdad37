import pytest

from services.event_bus import EventBus
from services.heartbeat_events import HeartbeatMessage
from services.heartbeat_monitor import HeartbeatMonitor
from services.safety_manager import reset_failsafe

QUADROTOR = 2
GCS = 6
ARDUPILOT = 3
STANDBY = 3
ACTIVE = 4
ARMED_BIT = 128


class ManualTimer:
    def __init__(self, deadline, callback):
        self.deadline = deadline
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True

    @property
    def live(self):
        return not (self.cancelled or self.fired)


class ManualTimerService:
    """Timer service driven by advance() instead of wall-clock time."""

    def __init__(self):
        self.now = 0.0
        self.timers = []

    def schedule(self, delay_s, callback):
        timer = ManualTimer(self.now + delay_s, callback)
        self.timers.append(timer)
        return timer

    def advance(self, seconds):
        self.now += seconds
        for timer in list(self.timers):
            if timer.live and timer.deadline <= self.now:
                timer.fired = True
                timer.callback()

    def live_timers(self):
        return [t for t in self.timers if t.live]


class Recorder:
    def __init__(self, bus):
        self.events = []
        bus.subscribe_all(self.events.append)

    def take(self):
        events = list(self.events)
        self.events.clear()
        return events


def make_hb(sys_id=5, type=QUADROTOR, custom_mode=0, base_mode=0, autopilot=ARDUPILOT, system_status=STANDBY):
    return HeartbeatMessage(
        sys_id=sys_id,
        type=type,
        custom_mode=custom_mode,
        base_mode=base_mode,
        autopilot=autopilot,
        system_status=system_status,
    )


@pytest.fixture
def timers():
    return ManualTimerService()


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def recorder(bus):
    return Recorder(bus)


@pytest.fixture
def make_monitor(bus, timers):
    def _make(**kwargs):
        return HeartbeatMonitor(bus, timer_service=timers, timeout_seconds=30.0, **kwargs)

    return _make


@pytest.fixture
def monitor(make_monitor):
    return make_monitor()


@pytest.fixture
def feed(monitor):
    """Submit heartbeats and process them synchronously."""

    def _feed(*messages):
        for msg in messages:
            monitor.submit_heartbeat(msg)
        monitor.process_pending()

    return _feed


@pytest.fixture(autouse=True)
def _clean_failsafe():
    reset_failsafe()
    yield
    reset_failsafe()
