"""Tests for rt.core.config module."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from rt.core.config import (
    CONFIG_FILENAME,
    ReleaseConfig,
    load_config,
    load_config_or_default,
)
from rt.core.result import Err, Ok


def _write(root: Path, data: object) -> Path:
    path = root / CONFIG_FILENAME
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestReleaseConfigFromDict:
    def test_empty_config_uses_defaults(self) -> None:
        config = ReleaseConfig.from_dict({})
        assert config.type is None
        assert dict(config.plans) == {}
        assert dict(config.env) == {}
        assert config.slug is None
        assert config.travis is None

    def test_full_config(self) -> None:
        config = ReleaseConfig.from_dict(
            {
                "type": "JavaScript",
                "slug": "acme/widget",
                "travis": "pro",
                "env": {"REGISTRY": "https://npm.example.com", "RETRIES": 3, "DRY": False},
                "plans": {
                    "publish": {
                        "commands": ["npm publish --registry $REGISTRY"],
                        "env": {"REGISTRY": "https://other.example.com"},
                    }
                },
            }
        )
        assert config.type == "JavaScript"
        assert config.slug == "acme/widget"
        assert config.travis == "pro"
        assert config.env == {
            "REGISTRY": "https://npm.example.com",
            "RETRIES": "3",
            "DRY": "false",
        }
        assert config.plans["publish"].commands == ("npm publish --registry $REGISTRY",)
        assert config.plan_env("publish") == {"REGISTRY": "https://other.example.com"}

    def test_plan_env_of_unknown_plan_is_empty(self) -> None:
        assert dict(ReleaseConfig().plan_env("release")) == {}

    def test_plan_without_commands_is_rejected(self) -> None:
        with pytest.raises(ValueError, match="commands"):
            ReleaseConfig.from_dict({"plans": {"release": {"env": {}}}})

    def test_non_string_command_is_rejected(self) -> None:
        with pytest.raises(ValueError, match="commands"):
            ReleaseConfig.from_dict({"plans": {"release": {"commands": ["git tag", 3]}}})

    def test_nested_env_value_is_rejected(self) -> None:
        with pytest.raises(ValueError, match="env"):
            ReleaseConfig.from_dict({"env": {"A": {"B": "c"}}})

    def test_plans_must_be_an_object(self) -> None:
        with pytest.raises(ValueError, match="plans"):
            ReleaseConfig.from_dict({"plans": ["release"]})

    def test_unknown_travis_endpoint_is_rejected(self) -> None:
        with pytest.raises(ValueError, match="travis"):
            ReleaseConfig.from_dict({"travis": "enterprise"})

    def test_mappings_are_read_only(self) -> None:
        config = ReleaseConfig.from_dict({"env": {"A": "1"}})
        with pytest.raises(TypeError):
            config.env["A"] = "2"  # type: ignore[index]


class TestLoadConfig:
    def test_load_valid_file(self, tmp_path: Path) -> None:
        path = _write(tmp_path, {"type": "JavaScript"})
        result = load_config(path)
        assert isinstance(result, Ok)
        assert result.value.type == "JavaScript"

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / CONFIG_FILENAME
        path.write_text("{not json", encoding="utf-8")
        result = load_config(path)
        assert isinstance(result, Err)
        assert "not valid JSON" in result.error.message
        assert result.error.hint == str(path)

    def test_root_must_be_object(self, tmp_path: Path) -> None:
        path = _write(tmp_path, ["a"])
        result = load_config(path)
        assert isinstance(result, Err)
        assert "must be a JSON object" in result.error.message

    def test_bad_shape_reports_path(self, tmp_path: Path) -> None:
        path = _write(tmp_path, {"plans": {"release": {}}})
        result = load_config(path)
        assert isinstance(result, Err)
        assert result.error.message.startswith(f"Invalid {CONFIG_FILENAME}")
        assert result.error.path == path

    def test_missing_file_is_an_error(self, tmp_path: Path) -> None:
        result = load_config(tmp_path / CONFIG_FILENAME)
        assert isinstance(result, Err)
        assert "not found" in result.error.message


class TestLoadConfigOrDefault:
    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        result = load_config_or_default(tmp_path)
        assert result == Ok(ReleaseConfig())

    def test_present_file_is_loaded(self, tmp_path: Path) -> None:
        _write(tmp_path, {"slug": "acme/widget"})
        result = load_config_or_default(tmp_path)
        assert isinstance(result, Ok)
        assert result.value.slug == "acme/widget"

    def test_broken_file_is_still_an_error(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("[", encoding="utf-8")
        assert isinstance(load_config_or_default(tmp_path), Err)
