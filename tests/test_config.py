"""
Tests for Configuration Management
"""

from pathlib import Path

import pytest
import yaml

from credsentry.core.config import (
    CONFIG_FILENAME,
    ConfigError,
    CredentialConfig,
    ScanType,
    ValueMatchPattern,
    generate_default_config,
)


class TestCredentialConfig:
    """Tests for CredentialConfig."""

    def test_defaults(self, config: CredentialConfig):
        """Test the built-in configuration enables everything."""
        assert config.exclude_tests
        assert not config.exclude_comments
        assert config.min_password_length == 6
        assert set(config.scan_types) == set(ScanType.ALL)
        assert any(p.name == "Postgres URI" for p in config.value_match_patterns)

    def test_test_directory_is_case_insensitive(self, config: CredentialConfig):
        """Test test directory names match regardless of case."""
        assert config.is_test_directory("tests")
        assert config.is_test_directory("TestData")
        assert not config.is_test_directory("src")

    def test_ignore_file_supports_globs(self, config: CredentialConfig):
        """Test ignore rules match exact names and glob patterns."""
        assert config.is_ignore_file(".git")
        assert config.is_ignore_file("node_modules")
        assert config.is_ignore_file("credsentry.egg-info")
        assert config.is_ignore_file(CONFIG_FILENAME)
        assert not config.is_ignore_file("main.py")

    def test_scan_type_toggle(self, config: CredentialConfig):
        """Test disabled scan types are reported as disabled."""
        config.scan_types = [ScanType.JSON]
        assert config.is_scan_type_enabled(ScanType.JSON)
        assert not config.is_scan_type_enabled(ScanType.XML)


class TestConfigMerge:
    """Tests for loading and merging configuration files."""

    def test_merge_appends_pattern_lists(self, config: CredentialConfig):
        """Test pattern lists from an additional config extend the root."""
        merged = config.merge({
            "variable_name_patterns": ["(?i)pin$"],
            "value_match_patterns": [{"name": "Internal", "pattern": "int_[a-z0-9]{20}"}],
        })
        assert merged.variable_name_patterns[-1] == "(?i)pin$"
        assert len(merged.variable_name_patterns) == len(config.variable_name_patterns) + 1
        assert merged.value_match_patterns[-1] == ValueMatchPattern("Internal", "int_[a-z0-9]{20}")

    def test_merge_does_not_duplicate_patterns(self, config: CredentialConfig):
        """Test merging the defaults onto themselves changes nothing."""
        merged = config.merge(config.to_dict())
        assert merged.variable_name_patterns == config.variable_name_patterns
        assert merged.value_match_patterns == config.value_match_patterns

    def test_merge_replaces_other_keys(self, config: CredentialConfig):
        """Test scalar settings and non-pattern lists are replaced."""
        merged = config.merge({
            "min_password_length": 10,
            "exclude_comments": True,
            "test_directories": ["spec"],
        })
        assert merged.min_password_length == 10
        assert merged.exclude_comments
        assert merged.test_directories == ["spec"]
        # the original is untouched
        assert config.min_password_length == 6

    def test_merge_rejects_unknown_keys(self, config: CredentialConfig):
        """Test typos in configuration keys are reported."""
        with pytest.raises(ConfigError, match="min_password_lenght"):
            config.merge({"min_password_lenght": 8})

    def test_merge_rejects_bad_types(self, config: CredentialConfig):
        """Test malformed values raise ConfigError."""
        with pytest.raises(ConfigError):
            config.merge({"ignore_files": "vendor"})
        with pytest.raises(ConfigError):
            config.merge({"min_password_length": "long"})
        with pytest.raises(ConfigError):
            config.merge({"value_match_patterns": [{"name": "no pattern"}]})

    def test_load_without_files_uses_defaults(self):
        """Test load() with no paths returns the built-in configuration."""
        assert CredentialConfig.load() == CredentialConfig.default()

    def test_load_merges_additional_config(self, temp_dir: Path):
        """Test an additional config file is merged onto the defaults."""
        path = temp_dir / CONFIG_FILENAME
        path.write_text("exclude_tests: false\nvariable_name_patterns:\n  - '(?i)pin$'\n")

        config = CredentialConfig.load(path)
        assert not config.exclude_tests
        assert "(?i)secret" in config.variable_name_patterns
        assert "(?i)pin$" in config.variable_name_patterns

    def test_load_root_config_replaces_defaults(self, temp_dir: Path):
        """Test a root config starts from an empty configuration."""
        root = temp_dir / "root.yaml"
        root.write_text("variable_name_patterns:\n  - '(?i)pin$'\nscan_types:\n  - json\n")

        config = CredentialConfig.load(root_config_path=root)
        assert config.variable_name_patterns == ["(?i)pin$"]
        assert config.scan_types == ["json"]
        assert config.value_match_patterns == []

    def test_load_missing_file(self, temp_dir: Path):
        """Test an explicitly named missing file is an error."""
        with pytest.raises(ConfigError, match="could not read"):
            CredentialConfig.load(temp_dir / "missing.yaml")

    def test_load_malformed_file(self, temp_dir: Path):
        """Test malformed YAML is an error."""
        path = temp_dir / "bad.yaml"
        path.write_text("scan_types: [json\n")
        with pytest.raises(ConfigError, match="could not parse"):
            CredentialConfig.load(path)

    def test_load_non_mapping(self, temp_dir: Path):
        """Test a YAML list at the top level is rejected."""
        path = temp_dir / "list.yaml"
        path.write_text("- json\n- xml\n")
        with pytest.raises(ConfigError, match="mapping"):
            CredentialConfig.load(path)

    def test_empty_file_is_valid(self, temp_dir: Path):
        """Test an empty config file changes nothing."""
        path = temp_dir / "empty.yaml"
        path.write_text("")
        assert CredentialConfig.load(path) == CredentialConfig.default()


class TestGenerateDefaultConfig:
    """Tests for generate_default_config."""

    def test_round_trips_to_defaults(self):
        """Test the generated file loads back into the default configuration."""
        data = yaml.safe_load(generate_default_config())
        assert CredentialConfig.from_dict(data) == CredentialConfig.default()

    def test_has_header(self):
        """Test the generated file explains itself."""
        assert generate_default_config().startswith("# CredSentry Configuration")
