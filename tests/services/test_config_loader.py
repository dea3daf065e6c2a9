import pytest

from wpprovisioner.errors import ProvisionerError
from wpprovisioner.services.config_loader import ConfigLoader


def test_config_loader_loads_yaml_mapping(tmp_path):
    config_file = tmp_path / ".wpprovisioner.yml"
    config_file.write_text(
        "domain: blog.example.com\nassume_yes: true\nmonitor_seconds: 30\n",
        encoding="utf-8",
    )

    loader = ConfigLoader()
    loaded = loader.load(str(config_file))

    assert loaded["domain"] == "blog.example.com"
    assert loaded["assume_yes"] is True
    assert loaded["monitor_seconds"] == 30


def test_config_loader_returns_empty_mapping_for_empty_file(tmp_path):
    config_file = tmp_path / ".wpprovisioner.yml"
    config_file.write_text("", encoding="utf-8")

    assert ConfigLoader().load(str(config_file)) == {}


def test_config_loader_rejects_unknown_keys(tmp_path):
    config_file = tmp_path / ".wpprovisioner.yml"
    config_file.write_text("unknown_key: true\n", encoding="utf-8")

    loader = ConfigLoader()

    with pytest.raises(ProvisionerError, match="Unknown configuration keys"):
        loader.load(str(config_file))


def test_config_loader_rejects_non_mapping_root(tmp_path):
    config_file = tmp_path / ".wpprovisioner.yml"
    config_file.write_text("- domain\n", encoding="utf-8")

    with pytest.raises(ProvisionerError, match="YAML mapping"):
        ConfigLoader().load(str(config_file))


def test_config_loader_reports_missing_file(tmp_path):
    with pytest.raises(ProvisionerError, match="Config file not found"):
        ConfigLoader().load(str(tmp_path / "missing.yml"))
