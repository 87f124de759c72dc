"""
tests/test_config.py — Configuration Loader Tests
==================================================
"""

from __future__ import annotations

import pytest

from starledger.config import load_config, normalize_channel

VALID_YAML = """\
command_prefix: "!"
channels:
  - "#SomeStreamer"
  - somestreamer
  - other_channel
membership_url: "https://chatters.test/group/user/{channel}/chatters"
fetch_timeout_seconds: 5
"""


class TestLoadConfig:
    def test_loads_values(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(VALID_YAML, encoding="utf-8")

        cfg = load_config(path)
        assert cfg.command_prefix == "!"
        assert cfg.channels == ("somestreamer", "other_channel")
        assert cfg.fetch_timeout_seconds == 5.0
        assert cfg.refresh_interval_seconds == 60
        assert cfg.membership_url_for("bob") == "https://chatters.test/group/user/bob/chatters"

    def test_prefix_defaults_to_hash(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "channels: [a]\nmembership_url: 'https://x.test/{channel}'\n", encoding="utf-8",
        )
        assert load_config(path).command_prefix == "#"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_missing_required_key(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("command_prefix: '#'\nchannels: [a]\n", encoding="utf-8")
        with pytest.raises(KeyError):
            load_config(path)

    def test_url_needs_channel_placeholder(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("channels: [a]\nmembership_url: 'https://x.test/'\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_config(path)


class TestNormalizeChannel:
    @pytest.mark.parametrize(
        "raw, expected",
        [("#Foo", "foo"), ("foo_bar", "foo_bar"), ("Foo-Bar!", "foobar")],
    )
    def test_normalize(self, raw, expected):
        assert normalize_channel(raw) == expected
