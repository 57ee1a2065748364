"""
Flask web server for Lexi.

Routes
──────
GET    /api/languages                                    List configured languages (JSON)
GET    /api/topics                                       List all topics (JSON)
POST   /api/topics                                       Create a topic
GET    /api/topics/<identifier>                          Topic metadata + translations per language
PATCH  /api/topics/<identifier>                          Update identifier / title / description
DELETE /api/topics/<identifier>                          Delete a topic and its translations
PUT    /api/topics/<identifier>/translations/<lang>/<key> Set one translation
DELETE /api/topics/<identifier>/keys/<key>               Remove a key from every language
"""

from __future__ import annotations

import logging
import os
import sqlite3
import sys
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify, request
from pydantic import BaseModel, ValidationError

# Allow running as `python web/app.py` from the project root
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from config.settings import Settings
from lexi import db
from lexi.exceptions import (
    CorruptTranslationsError,
    IllegalStateError,
    InvalidArgumentError,
    NotFoundError,
)
from lexi.languages import LanguageDirectory
from lexi.topic import Topic, all_topics, ensure_default_topic

logger = logging.getLogger(__name__)


# ── Request bodies ─────────────────────────────────────────────────────────


class TopicCreate(BaseModel):
    identifier: str
    title: str = ""
    description: str = ""


class TopicUpdate(BaseModel):
    identifier: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None


class TranslationValue(BaseModel):
    value: str


def _topic_payload(topic: Topic, languages: LanguageDirectory) -> dict:
    return {
        **topic.to_record().model_dump(),
        "translations": {
            str(language.id): topic.translations(language.id) for language in languages
        },
    }


# ── App factory ────────────────────────────────────────────────────────────


def create_app(settings: Optional[Settings] = None) -> Flask:
    """Build the Flask app, initialising the DB and the default topic."""
    settings = settings or Settings()
    settings.validate()
    languages = settings.language_directory()

    app = Flask(__name__)

    db.init_db()
    ensure_default_topic(languages)

    # ── Errors ─────────────────────────────────────────────────────────────

    @app.errorhandler(NotFoundError)
    def handle_not_found(exc: NotFoundError):
        return jsonify({"error": str(exc)}), 404

    @app.errorhandler(InvalidArgumentError)
    def handle_invalid(exc: InvalidArgumentError):
        return jsonify({"error": str(exc)}), 400

    @app.errorhandler(IllegalStateError)
    def handle_illegal_state(exc: IllegalStateError):
        return jsonify({"error": str(exc)}), 409

    @app.errorhandler(ValidationError)
    def handle_validation(exc: ValidationError):
        return jsonify({"error": str(exc)}), 400

    @app.errorhandler(sqlite3.Error)
    def handle_db_error(exc: sqlite3.Error):
        logger.exception("Database error on %s %s", request.method, request.path)
        return jsonify({"error": "Database error"}), 500

    @app.errorhandler(CorruptTranslationsError)
    def handle_corrupt_translations(exc: CorruptTranslationsError):
        logger.error(
            "Corrupt translations on %s %s", request.method, request.path, exc_info=exc
        )
        return jsonify({"error": str(exc)}), 500

    def body() -> dict:
        return request.get_json(silent=True) or {}

    # ── Languages ──────────────────────────────────────────────────────────

    @app.route("/api/languages")
    def list_languages():
        return jsonify([language.model_dump() for language in languages])

    # ── Topics ─────────────────────────────────────────────────────────────

    @app.route("/api/topics")
    def list_topics():
        return jsonify([record.model_dump() for record in all_topics()])

    @app.route("/api/topics", methods=["POST"])
    def create_topic():
        payload = TopicCreate.model_validate(body())
        topic = Topic(languages)
        topic.set_identifier(payload.identifier)
        topic.set_title(payload.title)
        topic.set_description(payload.description)
        try:
            topic.save()
        except sqlite3.IntegrityError:
            return jsonify({"error": f"Topic {payload.identifier!r} already exists"}), 409
        return jsonify(_topic_payload(topic, languages)), 201

    @app.route("/api/topics/<identifier>")
    def get_topic(identifier: str):
        topic = Topic.by_identifier(languages, identifier)
        return jsonify(_topic_payload(topic, languages))

    @app.route("/api/topics/<identifier>", methods=["PATCH"])
    def update_topic(identifier: str):
        payload = TopicUpdate.model_validate(body())
        topic = Topic.by_identifier(languages, identifier)
        if payload.identifier is not None and payload.identifier != topic.identifier:
            topic.set_identifier(payload.identifier)
        if payload.title is not None:
            topic.set_title(payload.title)
        if payload.description is not None:
            topic.set_description(payload.description)
        try:
            topic.save()
        except sqlite3.IntegrityError:
            return jsonify({"error": f"Topic {payload.identifier!r} already exists"}), 409
        return jsonify(_topic_payload(topic, languages))

    @app.route("/api/topics/<identifier>", methods=["DELETE"])
    def delete_topic(identifier: str):
        topic = Topic.by_identifier(languages, identifier)
        topic.delete()
        return jsonify({"deleted": identifier})

    # ── Translations ───────────────────────────────────────────────────────

    @app.route(
        "/api/topics/<identifier>/translations/<int:lang_id>/<key>", methods=["PUT"]
    )
    def set_translation(identifier: str, lang_id: int, key: str):
        payload = TranslationValue.model_validate(body())
        topic = Topic.by_identifier(languages, identifier)
        topic.set_translation(key, payload.value, lang_id)
        topic.save()
        return jsonify({"key": key, "lang_id": lang_id, "value": payload.value})

    @app.route("/api/topics/<identifier>/keys/<key>", methods=["DELETE"])
    def remove_key(identifier: str, key: str):
        topic = Topic.by_identifier(languages, identifier)
        topic.remove_key(key)
        topic.save()
        return jsonify({"deleted": key})

    return app


# ── Entry point ────────────────────────────────────────────────────────────

if __name__ == "__main__":
    load_dotenv()
    logging.basicConfig(level=logging.INFO)
    settings = Settings()
    create_app(settings).run(debug=settings.debug, host="0.0.0.0", port=settings.port)
