"""
lexi core package.

Modules
───────
models      — Pydantic data models (Language, TopicRecord)
exceptions  — Error hierarchy (NotFoundError, InvalidArgumentError, IllegalStateError)
languages   — LanguageDirectory: the set of languages translations are kept for
db          — SQLite connection handling and schema (topics, translations)
topic       — Topic: metadata + per-language translation maps with change tracking
"""
