import pytest

from buganizer.core import ConfigurationException
from buganizer.sla.infrastructure import SLAConfigManager


def write(path, text):
    path.write_text(text)
    return path


def test_missing_file_uses_defaults(tmp_path):
    manager = SLAConfigManager(default_threshold_hours=6)
    config = manager.load(tmp_path / "missing.yaml")

    assert config.get_base_hours("P1") == 24
    assert config.at_risk_threshold_hours == 6
    assert manager.get_config() is config


def test_load_yaml(tmp_path):
    path = write(tmp_path / "sla.yaml", """
base_hours:
  P1: 12
severity_multipliers:
  S3: 2.0
at_risk_threshold_hours: 8
notify_channel: "#sla"
""")
    config = SLAConfigManager().load(path)

    assert config.get_base_hours("P1") == 12
    assert config.get_base_hours("P0") == 4
    assert config.get_multiplier("S3") == 2.0
    assert config.at_risk_threshold_hours == 8
    assert config.notify_channel == "#sla"


def test_threshold_falls_back_to_settings_value(tmp_path):
    path = write(tmp_path / "sla.yaml", "base_hours:\n  P1: 12\n")
    assert SLAConfigManager(default_threshold_hours=2).load(path).at_risk_threshold_hours == 2


def test_invalid_file_fails_initial_load(tmp_path):
    path = write(tmp_path / "sla.yaml", "at_risk_threshold_hours: -1\n")

    with pytest.raises(ConfigurationException):
        SLAConfigManager().load(path)


def test_reload_picks_up_changes(tmp_path):
    path = write(tmp_path / "sla.yaml", "base_hours:\n  P1: 12\n")
    manager = SLAConfigManager()
    manager.load(path)

    write(path, "base_hours:\n  P1: 6\n")

    assert manager.reload() is True
    assert manager.get_config().get_base_hours("P1") == 6


@pytest.mark.parametrize("broken", ["base_hours: [unclosed\n", "just a string\n", "at_risk_threshold_hours: -5\n"])
def test_failed_reload_keeps_previous_config(tmp_path, broken):
    path = write(tmp_path / "sla.yaml", "base_hours:\n  P1: 12\n")
    manager = SLAConfigManager()
    manager.load(path)

    write(path, broken)

    assert manager.reload() is False
    assert manager.get_config().get_base_hours("P1") == 12


def test_config_before_load():
    with pytest.raises(ConfigurationException):
        SLAConfigManager().get_config()


def test_reload_before_load():
    assert SLAConfigManager().reload() is False
