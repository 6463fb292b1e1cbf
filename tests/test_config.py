"""Tests for configuration loading."""

from unittest.mock import patch

from tagdiary.config import Config, load_config


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        with patch("tagdiary.config.CONFIG_FILE", tmp_path / "missing.conf"):
            config = load_config()

        assert config == Config()
        assert config.store_backend == "file"
        assert config.autosave_cooldown == 1.0
        assert config.tag_marker == "#"

    def test_parse_values(self, tmp_path):
        config_file = tmp_path / "tagdiary.conf"
        config_file.write_text(
            "# tagdiary settings\n"
            "OWNER=alice\n"
            "STORE_BACKEND=http\n"
            'STORE_URL="https://diary.example.com/api" # remote\n'
            "STORE_TOKEN='s3cret'\n"
            "STORE_TIMEOUT=2.5\n"
            "AUTOSAVE_COOLDOWN=0.5  # seconds\n"
            "TELEGRAM_ALLOWED_USERS=123, 456\n"
            "\n"
            "not a setting\n"
        )

        with patch("tagdiary.config.CONFIG_FILE", config_file):
            config = load_config()

        assert config.owner == "alice"
        assert config.store_backend == "http"
        assert config.store_url == "https://diary.example.com/api"
        assert config.store_token == "s3cret"
        assert config.store_timeout == 2.5
        assert config.autosave_cooldown == 0.5
        assert config.telegram_allowed_users == [123, 456]

    def test_quoted_tag_marker(self, tmp_path):
        config_file = tmp_path / "tagdiary.conf"
        config_file.write_text('TAG_MARKER="@"\n')

        with patch("tagdiary.config.CONFIG_FILE", config_file):
            assert load_config().tag_marker == "@"

    def test_unquoted_hash_marker(self, tmp_path):
        config_file = tmp_path / "tagdiary.conf"
        config_file.write_text("TAG_MARKER=#\n")

        with patch("tagdiary.config.CONFIG_FILE", config_file):
            assert load_config().tag_marker == "#"

    def test_unquoted_marker_containing_hash(self, tmp_path):
        config_file = tmp_path / "tagdiary.conf"
        config_file.write_text("TAG_MARKER=#! # bang tags\n")

        with patch("tagdiary.config.CONFIG_FILE", config_file):
            assert load_config().tag_marker == "#!"

    def test_empty_marker_keeps_default(self, tmp_path):
        config_file = tmp_path / "tagdiary.conf"
        config_file.write_text("TAG_MARKER=\n")

        with patch("tagdiary.config.CONFIG_FILE", config_file):
            assert load_config().tag_marker == "#"

    def test_invalid_values_are_ignored(self, tmp_path, caplog):
        config_file = tmp_path / "tagdiary.conf"
        config_file.write_text(
            "STORE_BACKEND=carrier-pigeon\n"
            "AUTOSAVE_COOLDOWN=soon\n"
            "TELEGRAM_ALLOWED_USERS=me\n"
        )

        with patch("tagdiary.config.CONFIG_FILE", config_file):
            config = load_config()

        assert config.store_backend == "file"
        assert config.autosave_cooldown == 1.0
        assert config.telegram_allowed_users == []
        assert "carrier-pigeon" in caplog.text
        assert "AUTOSAVE_COOLDOWN" in caplog.text
