"""Tests for NasboxConfig."""

from __future__ import annotations

import pytest

from nasbox.config import NasboxConfig


class TestDefaults:
    def test_data_dir_defaults_under_root(self, tmp_path):
        config = NasboxConfig(storage_root=tmp_path)
        assert config.data_dir == tmp_path / ".nasbox"

    def test_reserved_names_include_trash_and_data_dir(self, tmp_path):
        config = NasboxConfig(storage_root=tmp_path)
        assert config.reserved_names == {".trash", ".nasbox"}

    def test_external_data_dir_not_reserved(self, tmp_path):
        config = NasboxConfig(storage_root=tmp_path / "root", data_dir=tmp_path / "meta")
        assert config.reserved_names == {".trash"}

    def test_share_url(self, tmp_path):
        config = NasboxConfig(storage_root=tmp_path, public_base_url="https://nas.local/")
        assert config.share_url("abc") == "https://nas.local/share/abc"

    def test_share_url_without_base(self, tmp_path):
        assert NasboxConfig(storage_root=tmp_path).share_url("abc") == "/share/abc"


class TestValidation:
    def test_trash_dir_must_be_hidden(self, tmp_path):
        with pytest.raises(ValueError):
            NasboxConfig(storage_root=tmp_path, trash_dir_name="trash")

    def test_trash_dir_single_segment(self, tmp_path):
        with pytest.raises(ValueError):
            NasboxConfig(storage_root=tmp_path, trash_dir_name=".a/b")

    def test_token_bytes_floor(self, tmp_path):
        with pytest.raises(ValueError):
            NasboxConfig(storage_root=tmp_path, token_bytes=8)

    def test_recent_limit_positive(self, tmp_path):
        with pytest.raises(ValueError):
            NasboxConfig(storage_root=tmp_path, recent_limit=0)


class TestFromEnv:
    def test_reads_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("NASBOX_STORAGE_ROOT", str(tmp_path))
        monkeypatch.setenv("NASBOX_PUBLIC_BASE_URL", "https://nas.local")
        monkeypatch.setenv("NASBOX_RECENT_LIMIT", "7")
        config = NasboxConfig.from_env()
        assert config.storage_root == tmp_path
        assert config.public_base_url == "https://nas.local"
        assert config.recent_limit == 7

    def test_overrides_win(self, tmp_path, monkeypatch):
        monkeypatch.setenv("NASBOX_STORAGE_ROOT", str(tmp_path / "env"))
        config = NasboxConfig.from_env(storage_root=tmp_path / "arg")
        assert config.storage_root == tmp_path / "arg"

    def test_missing_root(self, monkeypatch):
        monkeypatch.delenv("NASBOX_STORAGE_ROOT", raising=False)
        with pytest.raises(ValueError):
            NasboxConfig.from_env()
