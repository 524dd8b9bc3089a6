"""Tests for Settings configuration model."""

from pathlib import Path

import pytest

from talkorithm.config import Settings


class TestDefaults:
    def test_default_model(self):
        s = Settings()
        assert s.gemini_model == "gemini-2.5-flash-lite"

    def test_no_credential_by_default(self):
        s = Settings()
        assert s.gemini_api_key == ""
        assert s.relay_url == ""

    def test_default_database_path(self):
        s = Settings()
        assert s.database_path == Path("data/talkorithm.db")

    def test_default_thread(self):
        s = Settings()
        assert s.thread_id == "main"

    def test_default_windows(self):
        s = Settings()
        assert s.message_window_size == 100
        assert s.memory_window_size == 24
        assert s.memory_summary_size == 8

    def test_voice_toggles_on(self):
        s = Settings()
        assert s.auto_speak is True
        assert s.auto_send_voice is True


class TestGeminiEndpoint:
    def test_builds_generate_content_url(self):
        s = Settings()
        assert s.gemini_endpoint() == (
            "https://generativelanguage.googleapis.com/v1beta/models/"
            "gemini-2.5-flash-lite:generateContent"
        )

    def test_strips_trailing_slash(self):
        s = Settings(gemini_api_base="https://example.test/v1/", gemini_model="m")
        assert s.gemini_endpoint() == "https://example.test/v1/models/m:generateContent"


class TestExtraForbidden:
    def test_unknown_env_var_raises(self):
        with pytest.raises(ValueError, match="extra_forbidden"):
            Settings(**{"nonexistent_field": "value"})
