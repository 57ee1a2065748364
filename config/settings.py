"""Application settings — all configuration loaded from environment variables.

Usage:
    from config.settings import Settings
    settings = Settings()
    settings.validate()   # raises ValueError if LEXI_LANGUAGES is unusable
    languages = settings.language_directory()
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from lexi.languages import LanguageDirectory


@dataclass
class Settings:
    """Centralised application configuration.

    All values are read from environment variables at instantiation time
    so that tests can override them by patching ``os.environ``.
    """

    # ── Languages ───────────────────────────────────────────────────────────
    #: Comma-separated ``id:name[:title]`` entries, e.g. ``1:default,1010:de``.
    languages: str = field(
        default_factory=lambda: os.environ.get("LEXI_LANGUAGES", "1:default")
    )

    # ── Flask ───────────────────────────────────────────────────────────────
    debug: bool = field(
        default_factory=lambda: os.environ.get("FLASK_DEBUG", "0") == "1"
    )
    port: int = field(
        default_factory=lambda: int(os.environ.get("PORT", "5000"))
    )

    def language_directory(self) -> LanguageDirectory:
        """Build the ``LanguageDirectory`` described by ``languages``."""
        return LanguageDirectory.from_string(self.languages)

    def validate(self) -> None:
        """Raise ``ValueError`` if any required setting is missing or malformed."""
        if not len(self.language_directory()):
            raise ValueError(
                "LEXI_LANGUAGES environment variable lists no languages. "
                "Set it to e.g. '1:default,1010:de'."
            )
