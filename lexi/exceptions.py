"""Errors raised by the lexi core."""


class LexiError(Exception):
    """Base class for all lexi errors."""


class NotFoundError(LexiError, LookupError):
    """A topic or language lookup matched nothing."""


class InvalidArgumentError(LexiError, ValueError):
    """An identifier or translation key has an invalid format."""


class IllegalStateError(LexiError, RuntimeError):
    """The operation is not allowed for the topic in its current state."""


class CorruptTranslationsError(LexiError, ValueError):
    """A stored translations blob could not be decoded into a key → value map."""
