import pytest

from refmatch_lib.config import ConfigError, load_config, load_config_from, matching_settings


def test_repo_config_loads():
    cfg = load_config()
    assert cfg["paths"]["outputs_dir"]
    settings = matching_settings(cfg)
    assert settings.threshold == 0.5
    assert settings.in_library_threshold == 0.7
    assert settings.incomplete_threshold == 5


def test_missing_section_is_reported(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("paths:\n  outputs_dir: out\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config_from(path)
    with pytest.raises(FileNotFoundError):
        load_config_from(tmp_path / "nope.yaml")


def test_threshold_out_of_range_is_rejected():
    with pytest.raises(ConfigError):
        matching_settings({"matching": {"threshold": 1.5, "in_library_threshold": 0.7}})
    assert matching_settings({}).threshold == 0.5
