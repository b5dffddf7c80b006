"""Tests for config module."""

import pytest
from pathlib import Path

from src.gowatch.config import GowatchConfig


class TestGowatchConfig:
    """Tests for GowatchConfig class."""

    def test_default_values(self):
        config = GowatchConfig()
        assert config.root_dir == Path.cwd()
        assert config.build_flags == []
        assert config.run_flags == []
        assert config.ignore_patterns == []
        assert config.build_command == ["go", "build"]
        assert config.source_suffix == ".go"
        assert config.shutdown_timeout_s == 5.0
        assert config.poll_interval_ms == 100
        assert config.follow_symlinks is False

    def test_custom_values(self, tmp_path):
        config = GowatchConfig(
            root_dir=tmp_path,
            build_flags=["-race"],
            run_flags=["--port", "8080"],
            ignore_patterns=["*_test.go"],
        )
        
        assert config.root_dir == tmp_path
        assert config.build_flags == ["-race"]
        assert config.run_flags == ["--port", "8080"]
        assert config.ignore_patterns == ["*_test.go"]

    def test_string_root_converted_to_path(self):
        config = GowatchConfig(root_dir="/proj")
        assert isinstance(config.root_dir, Path)

    def test_empty_build_command_rejected(self):
        with pytest.raises(ValueError):
            GowatchConfig(build_command=[])

    def test_non_positive_poll_interval_rejected(self):
        with pytest.raises(ValueError):
            GowatchConfig(poll_interval_ms=0)

    def test_lists_are_not_shared(self):
        a = GowatchConfig()
        b = GowatchConfig()
        a.ignore_patterns.append("*.tmp")
        assert b.ignore_patterns == []


class TestBinaryName:
    """Tests for deriving the binary name from the root directory."""

    def test_final_segment(self):
        assert GowatchConfig(root_dir="/proj").binary_name == "proj"

    def test_trailing_separator(self):
        assert GowatchConfig(root_dir="/home/me/proj/").binary_name == "proj"

    def test_nested(self):
        assert GowatchConfig(root_dir="/a/b/service").binary_name == "service"

    def test_dot_resolves_to_directory_name(self, tmp_path, monkeypatch):
        project = tmp_path / "myapp"
        project.mkdir()
        monkeypatch.chdir(project)
        
        assert GowatchConfig(root_dir=".").binary_name == "myapp"

    def test_binary_path(self):
        config = GowatchConfig(root_dir="/proj")
        assert config.binary_path == Path("/proj/proj")


class TestFromEnv:
    """Tests for environment-based configuration."""

    def test_empty_environment_gives_defaults(self):
        config = GowatchConfig.from_env({})
        assert config.build_flags == []
        assert config.source_suffix == ".go"

    def test_reads_all_variables(self):
        config = GowatchConfig.from_env({
            "GOWATCH_DIR": "/srv/api",
            "GOWATCH_BUILD_FLAGS": "-race -tags 'a b'",
            "GOWATCH_RUN_FLAGS": "--port 8080",
            "GOWATCH_IGNORE": "*_test.go, vendor/*",
            "GOWATCH_SUFFIX": ".templ",
        })
        
        assert config.root_dir == Path("/srv/api")
        assert config.build_flags == ["-race", "-tags", "a b"]
        assert config.run_flags == ["--port", "8080"]
        assert config.ignore_patterns == ["*_test.go", "vendor/*"]
        assert config.source_suffix == ".templ"

    def test_reads_os_environ(self, monkeypatch):
        monkeypatch.setenv("GOWATCH_RUN_FLAGS", "-v")
        config = GowatchConfig.from_env()
        assert config.run_flags == ["-v"]
