from config import DEFAULT_HEARTBEAT_TIMEOUT_SEC, RelayConfig, get_relay_config, set_relay_config
from utils.mavlink_names import mode_name, system_status_name


def test_system_status_name():
    assert system_status_name(4) == "MAV_STATE_ACTIVE"
    assert system_status_name(None) == "None"
    assert system_status_name(250) == "250"


def test_mode_name_uses_vehicle_type_mapping():
    assert mode_name(2, 5) == "LOITER"  # quadrotor
    assert mode_name(None, 5) == "5"
    assert mode_name(200, 5) == "5"  # unknown vehicle type
    assert mode_name(2, None) == "None"


def test_relay_config_defaults_and_override():
    cfg = get_relay_config()
    assert cfg.heartbeat_timeout_sec == DEFAULT_HEARTBEAT_TIMEOUT_SEC == 30.0
    assert cfg.reset_baseline_on_reacquire is False

    custom = RelayConfig(heartbeat_timeout_sec=5.0)
    set_relay_config(custom)
    try:
        assert get_relay_config() is custom
    finally:
        set_relay_config(RelayConfig())
