"""Tests for configuration loading."""

import pytest

from linkcrawler.utils.config import Config, ConfigManager, load_config, get_config, parse_depth, validate_config


def write_config(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text)
    return path


class TestLoadConfig:
    """Test cases for the YAML configuration loader."""

    def test_full_file(self, tmp_path):
        path = write_config(tmp_path, """
crawler:
  seed_url: example.com
  task_count: 4
  max_depth: 2
  request_timeout: 10
logging:
  level: DEBUG
  file: null
  json: true
""")
        config = load_config(str(path))

        assert config.crawler.seed_url == "http://example.com/"
        assert config.crawler.task_count == 4
        assert config.crawler.max_depth == 2
        assert config.crawler.request_timeout == 10
        assert config.logging.level == "DEBUG"
        assert config.logging.file is None
        assert config.logging.json is True
        assert get_config() is config

    def test_defaults_for_missing_sections(self, tmp_path):
        config = load_config(str(write_config(tmp_path, "crawler: {}\n")))

        assert config.crawler.task_count == 1
        assert config.crawler.max_depth is None
        assert config.crawler.seed_url is None
        assert config.logging.level == "INFO"

    @pytest.mark.parametrize("value", ["-1", "null", "unbounded"])
    def test_unbounded_depth_spellings(self, tmp_path, value):
        config = load_config(str(write_config(tmp_path, f"crawler:\n  max_depth: {value}\n")))
        assert config.crawler.max_depth is None

    @pytest.mark.parametrize("text", [
        "crawler:\n  task_count: 0\n",
        "crawler:\n  task_count: many\n",
        "crawler:\n  max_depth: -3\n",
        "crawler:\n  seed_url: 'http://'\n",
        "crawler:\n  unknown_option: 1\n",
        "logging:\n  level: LOUD\n",
        "- just\n- a list\n",
    ])
    def test_invalid_values(self, tmp_path, text):
        with pytest.raises(ValueError):
            load_config(str(write_config(tmp_path, text)))

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigManager(str(tmp_path / "absent.yaml")).load_config()

    def test_config_before_load(self, tmp_path):
        manager = ConfigManager(str(tmp_path / "absent.yaml"))
        with pytest.raises(ValueError):
            manager.config


class TestParseDepth:
    """Test cases for parse_depth."""

    @pytest.mark.parametrize("value, expected", [
        (None, None), (-1, None), ("unbounded", None), ("UNBOUNDED", None),
        (0, 0), (3, 3), ("5", 5), ("-1", None),
    ])
    def test_valid(self, value, expected):
        assert parse_depth(value) == expected

    @pytest.mark.parametrize("value", [-2, "abc", 1.5, True])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_depth(value)


def test_default_config_is_valid():
    config = Config.default()
    validate_config(config)
    assert config.crawler.task_count == 1
    assert config.crawler.max_depth is None
