"""Tests for configuration module."""

import json

import pytest
from pydantic import ValidationError

from dchangelog.config import DocumentConfig, load_config
from dchangelog.errors import ConfigLoadError


class TestDocumentConfig:
    """Test DocumentConfig defaults and coercion."""

    def test_default_config(self):
        """Every value defaults to empty except the column labels."""
        config = DocumentConfig()

        assert config.pr.link == ""
        assert config.jira.link == ""
        assert config.jira.title == ""
        assert config.jira.description == ""
        assert config.developer.name == ""
        assert config.developer.title == "Developer"
        assert config.project.title == "Project"
        assert config.project.value == ""
        assert config.status.title == ""
        assert config.sign_approval.name == ""
        assert config.sign_approval.role == ""

    def test_partial_config_keeps_other_defaults(self):
        config = DocumentConfig.model_validate(
            {"developer": {"name": "Alice"}, "project": {"title": "Demo"}}
        )

        assert config.developer.name == "Alice"
        assert config.developer.title == "Developer"
        assert config.project.title == "Demo"
        assert config.project.value == ""

    def test_full_config(self):
        config = DocumentConfig.model_validate({
            "pr": {"link": "https://git.example.com/pr/7"},
            "jira": {
                "link": "https://jira.example.com/ABC-1",
                "title": "ABC-1 Login",
                "description": "Add login page",
            },
            "developer": {"name": "Alice", "title": "Engineer"},
            "project": {"title": "Project", "value": "Portal"},
            "status": {"title": "Done"},
            "sign_approval": {"name": "Bob", "role": "Lead"},
        })

        assert config.pr.link == "https://git.example.com/pr/7"
        assert config.jira.title == "ABC-1 Login"
        assert config.developer.title == "Engineer"
        assert config.project.value == "Portal"
        assert config.status.title == "Done"
        assert config.sign_approval.name == "Bob"
        assert config.sign_approval.role == "Lead"

    def test_null_values_use_defaults(self):
        config = DocumentConfig.model_validate(
            {"developer": {"name": None, "title": None}, "jira": None}
        )

        assert config.developer.name == ""
        assert config.developer.title == "Developer"
        assert config.jira.title == ""

    def test_numbers_are_coerced_to_strings(self):
        config = DocumentConfig.model_validate({"project": {"value": 42}})

        assert config.project.value == "42"

    def test_unknown_keys_are_ignored(self):
        config = DocumentConfig.model_validate(
            {"developer": {"name": "Alice", "team": "core"}, "extra": {"x": "y"}}
        )

        assert config.developer.name == "Alice"

    def test_config_is_frozen(self):
        config = DocumentConfig()

        with pytest.raises(ValidationError):
            config.developer.name = "Mallory"


class TestLoadConfig:
    """Test loading configuration files."""

    def test_load_config(self, temp_dir):
        path = temp_dir / "tsd.json"
        path.write_text(json.dumps({"status": {"title": "In Review"}}), encoding="utf-8")

        config = load_config(path)

        assert config.status.title == "In Review"

    def test_load_empty_object(self, temp_dir):
        path = temp_dir / "tsd.json"
        path.write_text("{}", encoding="utf-8")

        assert load_config(str(path)) == DocumentConfig()

    def test_missing_file(self, temp_dir):
        with pytest.raises(ConfigLoadError) as exc_info:
            load_config(temp_dir / "missing.json")

        assert exc_info.value.code == "CONFIG_INVALID"
        assert "missing.json" in exc_info.value.message

    def test_invalid_json(self, temp_dir):
        path = temp_dir / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ConfigLoadError) as exc_info:
            load_config(path)

        assert exc_info.value.details["path"] == str(path)

    def test_top_level_must_be_object(self, temp_dir):
        path = temp_dir / "list.json"
        path.write_text("[1, 2]", encoding="utf-8")

        with pytest.raises(ConfigLoadError):
            load_config(path)

    def test_wrong_value_type(self, temp_dir):
        path = temp_dir / "bad.json"
        path.write_text(json.dumps({"developer": {"name": ["Alice"]}}), encoding="utf-8")

        with pytest.raises(ConfigLoadError) as exc_info:
            load_config(path)

        assert "developer.name" in exc_info.value.details["reason"]
