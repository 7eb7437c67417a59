"""Tests for pipe options and YAML configuration."""

import logging

import pytest
import yaml
from pydantic import ValidationError

from fluentpipe import PipeOptions, configure, load_config, resolve_options


@pytest.fixture
def write_config(tmp_path):
    """Write a config dict to a YAML file and return its path."""

    def _write(config):
        config_path = tmp_path / "pipe.yaml"
        with config_path.open("w") as f:
            yaml.dump(config, f)
        return config_path

    return _write


class TestPipeOptions:
    """Test PipeOptions validation."""

    def test_default(self):
        assert PipeOptions().use_pipe_error is False

    def test_field_name_and_alias(self):
        assert PipeOptions(use_pipe_error=True).use_pipe_error is True
        assert PipeOptions.model_validate({"usePipeError": True}).use_pipe_error is True

    def test_frozen(self):
        options = PipeOptions()
        with pytest.raises(ValidationError):
            options.use_pipe_error = True

    def test_unknown_key_rejected(self):
        with pytest.raises(ValidationError):
            PipeOptions.model_validate({"retries": 3})

    def test_non_boolean_rejected(self):
        with pytest.raises(ValidationError):
            PipeOptions.model_validate({"use_pipe_error": "sometimes"})


class TestResolveOptions:
    """Test resolve_options merging."""

    def test_none(self):
        assert resolve_options() == PipeOptions()

    def test_options_passthrough(self):
        options = PipeOptions(use_pipe_error=True)
        assert resolve_options(options) is options

    def test_mapping(self):
        assert resolve_options({"use_pipe_error": True}).use_pipe_error is True

    def test_override_wins(self):
        options = PipeOptions(use_pipe_error=True)
        assert resolve_options(options, use_pipe_error=False).use_pipe_error is False

    def test_keyword_only(self):
        assert resolve_options(use_pipe_error=True).use_pipe_error is True


class TestLoadConfig:
    """Test YAML config loading."""

    def test_template_substitution(self, write_config):
        config_path = write_config(
            {
                "run_name": "nightly",
                "log_file": "{{ run_name }}.log",
                "nested": {"items": ["{{ run_name }}-a", 3]},
            }
        )

        config = load_config(config_path)

        assert config["log_file"] == "nightly.log"
        assert config["nested"]["items"] == ["nightly-a", 3]

    def test_empty_file(self, tmp_path):
        config_path = tmp_path / "empty.yaml"
        config_path.write_text("")

        assert load_config(config_path) == {}

    def test_non_mapping_rejected(self, tmp_path):
        config_path = tmp_path / "list.yaml"
        config_path.write_text("- a\n- b\n")

        with pytest.raises(ValueError, match="must contain a mapping"):
            load_config(config_path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")


@pytest.mark.usefixtures("restore_root_logger")
class TestConfigure:
    """Test configure() logging setup and options."""

    def test_returns_pipe_options(self, write_config):
        config_path = write_config({"pipe": {"use_pipe_error": True}})

        assert configure(config_path).use_pipe_error is True

    def test_defaults_without_pipe_section(self, write_config):
        config_path = write_config({"log_level": "WARNING"})

        assert configure(config_path) == PipeOptions()

    def test_relative_log_file_in_logs_dir(self, write_config, tmp_path):
        config_path = write_config({"run_name": "demo", "log_file": "{{ run_name }}.log"})

        configure(config_path)
        logging.getLogger("fluentpipe.test").info("configured")
        for handler in logging.getLogger().handlers:
            handler.flush()

        log_file = tmp_path / "logs" / "demo.log"
        assert log_file.exists()
        assert "configured" in log_file.read_text(encoding="utf-8")

    def test_debug_level_shows_log_lines(self, write_config):
        config_path = write_config({"log_level": "debug"})

        configure(config_path)

        console_levels = [
            h.level for h in logging.getLogger().handlers if getattr(h, "_fluentpipe_console", False)
        ]
        assert console_levels == [logging.DEBUG]

    def test_unknown_log_level(self, write_config):
        config_path = write_config({"log_level": "LOUD"})

        with pytest.raises(ValueError, match="Unknown log_level"):
            configure(config_path)

    def test_invalid_pipe_section(self, write_config):
        config_path = write_config({"pipe": {"use_pipe_error": "maybe"}})

        with pytest.raises(ValidationError):
            configure(config_path)
