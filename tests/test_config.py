"""
Tests for configuration loading.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from carwash.config import AppConfig
from carwash.domain.conflict_checker import OverlapScope


def test_defaults():
    config = AppConfig()

    assert config.database_url == "sqlite:///carwash.db"
    assert config.timezone == "Europe/Berlin"
    assert config.overlap_scope is OverlapScope.GLOBAL
    assert config.log_level == "WARNING"


def test_load_from_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "database_url: sqlite://\n"
        "timezone: UTC\n"
        "overlap_scope: service\n"
        "log_level: debug\n",
        encoding="utf-8",
    )

    config = AppConfig.load_from_yaml(path)

    assert config.database_url == "sqlite://"
    assert config.overlap_scope is OverlapScope.SERVICE
    assert config.log_level == "DEBUG"


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        AppConfig.load_from_yaml(tmp_path / "nope.yaml")


def test_invalid_yaml_raises_value_error(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("database_url: [unclosed\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid YAML"):
        AppConfig.load_from_yaml(path)


def test_non_mapping_root_raises(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ValueError, match="mapping"):
        AppConfig.load_from_yaml(path)


@pytest.mark.parametrize(
    "field,value",
    [
        ("timezone", "Mars/Olympus_Mons"),
        ("overlap_scope", "per-bay"),
        ("log_level", "LOUD"),
        ("database_url", "  "),
    ],
)
def test_invalid_values_are_rejected(field, value):
    with pytest.raises(PydanticValidationError):
        AppConfig(**{field: value})


def test_load_or_default_without_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("carwash.config.get_default_config_path", lambda: tmp_path / "config.yaml")

    assert AppConfig.load_or_default(None) == AppConfig()
