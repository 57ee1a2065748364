"""Topics and their per-language translations.

A ``Topic`` wraps one row of the topics table plus one translation map per
known language. Translation maps are loaded lazily, one language at a time,
the first time they are touched.

Changes are tracked explicitly:

- ``dirty_fields``    — which of title / description / identifier changed
- ``dirty_languages`` — which language maps changed

``save()`` writes only what is dirty and then clears both sets, so calling it
twice in a row issues no statements the second time.

Every key present for one language is kept present for all languages
(possibly as an empty string), so editors can always list the full key set.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Mapping, Optional

from lexi import db
from lexi.exceptions import (
    CorruptTranslationsError,
    IllegalStateError,
    InvalidArgumentError,
    NotFoundError,
)
from lexi.languages import LanguageDirectory
from lexi.models import TopicRecord

logger = logging.getLogger(__name__)

#: Allowed characters for translation keys and topic identifiers.
VALID_KEY_OR_IDENTIFIER_RE = re.compile(r"^[A-Za-z0-9_-]+$")

#: Identifier of the default topic; it can never be renamed or deleted.
DEFAULT_TOPIC_IDENTIFIER = "default"

#: Metadata fields covered by change tracking.
TRACKED_FIELDS: frozenset[str] = frozenset(["title", "description", "identifier"])

_LOOKUP_COLUMNS: frozenset[str] = frozenset(["id", "identifier"])


# ── Validation & serialisation ─────────────────────────────────────────────────


def is_valid_key_or_identifier(value: object) -> bool:
    """Check if a translation key or topic identifier is valid.

    Only ASCII letters, digits, ``_`` and ``-`` are allowed. Spaces and dots
    are not.

    Examples:
        >>> is_valid_key_or_identifier("page_title")
        True
        >>> is_valid_key_or_identifier("page.title")
        False
    """
    if not isinstance(value, str):
        return False
    return VALID_KEY_OR_IDENTIFIER_RE.fullmatch(value) is not None


def encode_translations(translations: Mapping[str, str]) -> str:
    """Serialise a key → value map as JSON with keys in sorted order."""
    return json.dumps(dict(translations), sort_keys=True, ensure_ascii=False)


def decode_translations(blob: Optional[str]) -> dict[str, str]:
    """Deserialise a stored translations blob. Empty or NULL yields ``{}``.

    Raises:
        CorruptTranslationsError: If the blob is not a JSON object.
    """
    if not blob:
        return {}
    try:
        translations = json.loads(blob)
    except json.JSONDecodeError as exc:
        raise CorruptTranslationsError(f"Translations blob is not valid JSON: {exc}") from exc
    if not isinstance(translations, dict):
        raise CorruptTranslationsError(
            f"Translations blob must be a JSON object, got {type(translations).__name__}"
        )
    return translations


# ── Topic ──────────────────────────────────────────────────────────────────────


class Topic:
    """A translation topic with change tracking.

    Construct with only a ``LanguageDirectory`` for a new, unsaved topic, or
    pass *topic_id* (or use ``by_id`` / ``by_identifier``) to load one.
    """

    is_valid_key_or_identifier = staticmethod(is_valid_key_or_identifier)

    def __init__(self, languages: LanguageDirectory, topic_id: int = 0):
        self.languages = languages
        self._id = 0
        self._identifier = ""
        self._title = ""
        self._description = ""
        self._translations: dict[int, dict[str, str]] = {}
        self._dirty_fields: set[str] = set()
        self._dirty_languages: set[int] = set()
        if topic_id:
            self._load("id", int(topic_id))

    @classmethod
    def by_id(cls, languages: LanguageDirectory, topic_id: int) -> "Topic":
        """Load a topic by its primary key.

        Raises:
            NotFoundError: If no topic has this id.
        """
        topic = cls(languages)
        topic._load("id", int(topic_id))
        return topic

    @classmethod
    def by_identifier(cls, languages: LanguageDirectory, identifier: str) -> "Topic":
        """Load a topic by its unique identifier.

        Raises:
            NotFoundError: If no topic has this identifier.
        """
        topic = cls(languages)
        topic._load("identifier", identifier)
        return topic

    def __repr__(self) -> str:
        return f"Topic(id={self._id!r}, identifier={self._identifier!r})"

    # ── Fields ─────────────────────────────────────────────────────────────────

    @property
    def id(self) -> int:
        return self._id

    @property
    def identifier(self) -> str:
        return self._identifier

    @identifier.setter
    def identifier(self, value: str) -> None:
        self.set_identifier(value)

    def set_identifier(self, identifier: str) -> None:
        """Change the identifier.

        Raises:
            InvalidArgumentError: If *identifier* contains disallowed characters.
            IllegalStateError: If this is the default topic.
        """
        if not is_valid_key_or_identifier(identifier):
            raise InvalidArgumentError(f"Identifier {identifier!r} is not valid")
        if self._identifier == DEFAULT_TOPIC_IDENTIFIER:
            raise IllegalStateError("Can't change the identifier of the default topic")
        self._identifier = identifier
        self._dirty_fields.add("identifier")

    @property
    def title(self) -> str:
        return self._title

    @title.setter
    def title(self, value: str) -> None:
        self.set_title(value)

    def set_title(self, title: str) -> None:
        self._title = title
        self._dirty_fields.add("title")

    @property
    def description(self) -> str:
        return self._description

    @description.setter
    def description(self, value: str) -> None:
        self.set_description(value)

    def set_description(self, description: str) -> None:
        self._description = description
        self._dirty_fields.add("description")

    @property
    def dirty_fields(self) -> frozenset[str]:
        return frozenset(self._dirty_fields)

    @property
    def dirty_languages(self) -> frozenset[int]:
        return frozenset(self._dirty_languages)

    @property
    def is_dirty(self) -> bool:
        return bool(self._dirty_fields or self._dirty_languages)

    def to_record(self) -> TopicRecord:
        return TopicRecord(
            id=self._id,
            identifier=self._identifier,
            title=self._title,
            description=self._description,
        )

    # ── Translations ───────────────────────────────────────────────────────────

    def get_translation(self, key: str, lang_id: int) -> str:
        """Return the translation of *key* in a language.

        Args:
            key: The translation key.
            lang_id: ID of a language known to the directory.

        Returns:
            The stored value, or ``""`` if the key has no entry.

        Raises:
            NotFoundError: If the language is unknown.
        """
        lang_id = self._require_language(lang_id)
        return self._language_map(lang_id).get(key, "")

    def set_translation(self, key: str, value: str, lang_id: int) -> None:
        """Insert or update a translation.

        A key that is new for *lang_id* is also added, with an empty value, to
        every other language that does not have it yet.

        Raises:
            NotFoundError: If the language is unknown.
            InvalidArgumentError: If *key* contains disallowed characters.
        """
        lang_id = self._require_language(lang_id)
        if not is_valid_key_or_identifier(key):
            raise InvalidArgumentError(f"Key {key!r} is not valid")

        translations = self._language_map(lang_id)
        is_new = key not in translations
        translations[key] = value
        self._dirty_languages.add(lang_id)

        if not is_new:
            return
        for language in self.languages:
            if language.id == lang_id:
                continue
            other = self._language_map(language.id)
            if key not in other:
                other[key] = ""
                self._dirty_languages.add(language.id)

    def unset_key(self, key: str) -> None:
        """Drop *key* from every language map held in memory.

        Nothing is marked dirty; see ``remove_key`` to persist a removal.
        """
        for language in self.languages:
            translations = self._translations.get(language.id)
            if translations is not None:
                translations.pop(key, None)

    def remove_key(self, key: str) -> None:
        """Drop *key* from all languages and mark the affected ones dirty."""
        for language in self.languages:
            translations = self._language_map(language.id)
            if key in translations:
                del translations[key]
                self._dirty_languages.add(language.id)

    def translations(self, lang_id: int) -> dict[str, str]:
        """Return a copy of the full key → value map of one language.

        Raises:
            NotFoundError: If the language is unknown.
        """
        lang_id = self._require_language(lang_id)
        return dict(self._language_map(lang_id))

    def keys(self) -> list[str]:
        """Return all keys of this topic, sorted."""
        keys: set[str] = set()
        for language in self.languages:
            keys.update(self._language_map(language.id))
        return sorted(keys)

    # ── Persistence ────────────────────────────────────────────────────────────

    def save(self) -> None:
        """Write pending changes.

        Creates the topic if it has no id yet. Otherwise updates the metadata
        when any of it changed. Then writes every changed language map.

        Raises:
            IllegalStateError: If a new topic has no identifier.
        """
        if not self._id:
            self._create()
        elif self._dirty_fields & TRACKED_FIELDS:
            with db.connect() as conn:
                conn.execute(
                    f"UPDATE {db.TOPICS_TABLE} SET title = ?, description = ?, "
                    "identifier = ? WHERE id = ?",
                    (self._title, self._description, self._identifier, self._id),
                )
            self._dirty_fields -= TRACKED_FIELDS
            logger.info("Updated topic id=%d identifier=%r", self._id, self._identifier)

        for lang_id in sorted(self._dirty_languages):
            self._save_translations(lang_id)

        self._dirty_fields.clear()
        self._dirty_languages.clear()

    def delete(self) -> None:
        """Delete the topic and all of its translations.

        The object is reset to an unsaved, empty topic afterwards. Its
        translation maps are not cleared, so discard the object.

        Raises:
            IllegalStateError: If this is the default topic.
        """
        if self._identifier == DEFAULT_TOPIC_IDENTIFIER:
            raise IllegalStateError("Can't delete the default topic")

        with db.connect() as conn:
            conn.execute(
                f"DELETE FROM {db.TRANSLATIONS_TABLE} WHERE topic_id = ?", (self._id,)
            )
            conn.execute(f"DELETE FROM {db.TOPICS_TABLE} WHERE id = ?", (self._id,))
        logger.info("Deleted topic id=%d identifier=%r", self._id, self._identifier)

        self._id = 0
        self._title = ""
        self._description = ""
        self._identifier = ""

    # ── Internals ──────────────────────────────────────────────────────────────

    def _require_language(self, lang_id: int) -> int:
        language = self.languages.get(lang_id)
        if language is None:
            raise NotFoundError(f"Language {lang_id!r} not found")
        return language.id

    def _language_map(self, lang_id: int) -> dict[str, str]:
        if lang_id not in self._translations:
            self._load_translations(lang_id)
        return self._translations[lang_id]

    def _load(self, column: str, value: object) -> None:
        if column not in _LOOKUP_COLUMNS:
            raise ValueError(f"Can't look up topics by {column!r}")
        with db.connect() as conn:
            row = conn.execute(
                f"SELECT id, title, description, identifier FROM {db.TOPICS_TABLE} "
                f"WHERE {column} = ?",
                (value,),
            ).fetchone()

        if row is None:
            raise NotFoundError(f"Topic with {column} {value!r} does not exist")

        self._id = int(row["id"])
        self._title = row["title"] or ""
        self._description = row["description"] or ""
        self._identifier = row["identifier"]

    def _create(self) -> None:
        if not self._identifier:
            raise IllegalStateError("A topic identifier must be set before saving")

        with db.connect() as conn:
            cursor = conn.execute(
                f"INSERT INTO {db.TOPICS_TABLE} (title, identifier, description) "
                "VALUES (?, ?, ?)",
                (self._title, self._identifier, self._description),
            )
            topic_id = cursor.lastrowid
            conn.executemany(
                f"INSERT INTO {db.TRANSLATIONS_TABLE} (topic_id, lang_id) VALUES (?, ?)",
                [(topic_id, language.id) for language in self.languages],
            )

        self._id = topic_id
        logger.info("Created topic id=%d identifier=%r", self._id, self._identifier)

    def _load_translations(self, lang_id: int) -> None:
        if not self._id:
            self._translations[lang_id] = {}
            return

        with db.connect() as conn:
            row = conn.execute(
                f"SELECT translations FROM {db.TRANSLATIONS_TABLE} "
                "WHERE topic_id = ? AND lang_id = ?",
                (self._id, lang_id),
            ).fetchone()

        self._translations[lang_id] = (
            decode_translations(row["translations"]) if row is not None else {}
        )
        logger.debug(
            "Loaded %d translation(s) for topic id=%d lang=%d",
            len(self._translations[lang_id]), self._id, lang_id,
        )

    def _save_translations(self, lang_id: int) -> None:
        blob = encode_translations(self._translations.get(lang_id, {}))
        with db.connect() as conn:
            cursor = conn.execute(
                f"UPDATE {db.TRANSLATIONS_TABLE} SET translations = ? "
                "WHERE topic_id = ? AND lang_id = ?",
                (blob, self._id, lang_id),
            )
            if cursor.rowcount == 0:
                # Language was configured after the topic was created
                logger.warning(
                    "No translations row for topic id=%d lang=%d; inserting one",
                    self._id, lang_id,
                )
                conn.execute(
                    f"INSERT INTO {db.TRANSLATIONS_TABLE} (topic_id, lang_id, translations) "
                    "VALUES (?, ?, ?)",
                    (self._id, lang_id, blob),
                )
        logger.debug("Saved translations for topic id=%d lang=%d", self._id, lang_id)


# ── Module helpers ─────────────────────────────────────────────────────────────


def all_topics() -> list[TopicRecord]:
    """Return every topic, ordered by identifier."""
    with db.connect() as conn:
        rows = conn.execute(
            f"SELECT id, identifier, title, description FROM {db.TOPICS_TABLE} "
            "ORDER BY identifier"
        ).fetchall()

    return [
        TopicRecord(
            id=row["id"],
            identifier=row["identifier"],
            title=row["title"] or "",
            description=row["description"] or "",
        )
        for row in rows
    ]


def ensure_default_topic(languages: LanguageDirectory) -> Topic:
    """Load the default topic, creating it first if it does not exist."""
    try:
        return Topic.by_identifier(languages, DEFAULT_TOPIC_IDENTIFIER)
    except NotFoundError:
        topic = Topic(languages)
        topic.set_identifier(DEFAULT_TOPIC_IDENTIFIER)
        topic.set_title("Default")
        topic.save()
        return topic
