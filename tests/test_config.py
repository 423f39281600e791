"""Tests for configuration loading."""

import os
import tempfile
from pathlib import Path

import pytest

from mdassets.config import load_config


def test_load_config_defaults():
    """Test loading config with defaults when no file exists."""
    with tempfile.TemporaryDirectory() as tmpdir:
        orig_cwd = os.getcwd()
        try:
            os.chdir(tmpdir)
            config = load_config()
        finally:
            os.chdir(orig_cwd)
    
    assert config.assets.dir == "assets"
    assert config.assets.backup_prefix == "assets_bak_"
    assert config.assets.pattern == "*.md"
    assert config.fetch.max_attempts == 3
    assert config.fetch.base_delay == 2.0
    assert config.fetch.timeout == 60.0
    assert config.fetch.max_bytes == 50 * 1024 * 1024
    assert config.fetch.verify_tls is False
    assert config.source is None


def test_load_config_from_file():
    """Test loading config from a file."""
    with tempfile.TemporaryDirectory() as tmpdir:
        config_path = Path(tmpdir) / "mdassets.toml"
        config_path.write_text("""
[assets]
dir = "media"
pattern = "*.markdown"

[fetch]
max_attempts = 5
base_delay = 0.5
timeout = 10
verify_tls = true
user_agent = "mdassets-test"
""")
        
        config = load_config(config_path=config_path)
        
        assert config.assets.dir == "media"
        assert config.assets.backup_prefix == "media_bak_"
        assert config.assets.pattern == "*.markdown"
        assert config.fetch.max_attempts == 5
        assert config.fetch.base_delay == 0.5
        assert config.fetch.timeout == 10.0
        assert config.fetch.verify_tls is True
        assert config.fetch.user_agent == "mdassets-test"
        assert config.source == config_path


def test_load_config_search_target():
    """Test config search in the target directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        target = Path(tmpdir) / "docs"
        target.mkdir()
        (target / "mdassets.toml").write_text("""
[fetch]
max_attempts = 1
""")
        
        config = load_config(target_path=target)
        assert config.fetch.max_attempts == 1


def test_load_config_missing_explicit_file(tmp_path):
    """Test that an explicit but missing config file is an error."""
    with pytest.raises(FileNotFoundError):
        load_config(config_path=tmp_path / "nope.toml")
