"""Language directory.

Holds the languages translations are kept for. Every topic stores exactly one
translation map per language listed here.

Configuration format (see ``config.settings``)::

    LEXI_LANGUAGES="1:default,1010:de:Deutsch"

Each comma-separated entry is ``id:name`` or ``id:name:title``.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional

from lexi.models import Language

logger = logging.getLogger(__name__)


class LanguageDirectory:
    """Ordered, read-only collection of ``Language`` records keyed by id."""

    def __init__(self, languages: Iterable[Language] = ()):
        self._languages: dict[int, Language] = {}
        for language in languages:
            if language.id in self._languages:
                raise ValueError(f"Duplicate language id {language.id}")
            self._languages[language.id] = language

    @classmethod
    def from_string(cls, value: str) -> "LanguageDirectory":
        """Parse a ``id:name[:title]`` list separated by commas.

        Args:
            value: The raw configuration string.

        Returns:
            A new ``LanguageDirectory``.

        Raises:
            ValueError: If an entry is malformed or an id repeats.

        Examples:
            >>> [lang.name for lang in LanguageDirectory.from_string("1:default,2:de")]
            ['default', 'de']
        """
        languages: list[Language] = []
        for entry in value.split(","):
            entry = entry.strip()
            if not entry:
                continue
            parts = [part.strip() for part in entry.split(":")]
            if len(parts) not in (2, 3) or not parts[1]:
                raise ValueError(f"Malformed language entry {entry!r}")
            try:
                lang_id = int(parts[0])
            except ValueError:
                raise ValueError(f"Language id in {entry!r} is not an integer") from None
            title = parts[2] if len(parts) == 3 else ""
            languages.append(Language(id=lang_id, name=parts[1], title=title))

        directory = cls(languages)
        logger.debug("Parsed %d language(s) from %r", len(directory), value)
        return directory

    def get(self, lang_id: int) -> Optional[Language]:
        """Return the language with *lang_id*, or None if it is unknown."""
        try:
            return self._languages.get(int(lang_id))
        except (TypeError, ValueError):
            return None

    def ids(self) -> list[int]:
        return list(self._languages)

    def __iter__(self) -> Iterator[Language]:
        return iter(self._languages.values())

    def __len__(self) -> int:
        return len(self._languages)

    def __contains__(self, lang_id: object) -> bool:
        return self.get(lang_id) is not None  # type: ignore[arg-type]
