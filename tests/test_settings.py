"""Tests for config/settings.py"""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from config.settings import Settings


class TestSettings:
    @patch.dict(os.environ, {"LEXI_LANGUAGES": "1:default,2:de", "PORT": "8080", "FLASK_DEBUG": "1"})
    def test_reads_environment(self):
        settings = Settings()
        assert settings.port == 8080
        assert settings.debug is True
        assert settings.language_directory().ids() == [1, 2]

    @patch.dict(os.environ, {}, clear=True)
    def test_defaults(self):
        settings = Settings()
        assert settings.languages == "1:default"
        assert settings.port == 5000
        assert settings.debug is False
        settings.validate()

    def test_validate_rejects_empty_language_list(self):
        with pytest.raises(ValueError, match="LEXI_LANGUAGES"):
            Settings(languages="").validate()

    def test_validate_rejects_malformed_language_list(self):
        with pytest.raises(ValueError):
            Settings(languages="de").validate()
