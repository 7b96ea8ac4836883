"""Singleton accessor for the MongoDB client."""

from __future__ import annotations

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from ..config import MONGODB_DATABASE, MONGODB_URI
from ..errors import ConfigurationError

_client: MongoClient | None = None


def get_mongo_client() -> MongoClient:
    """Return a singleton :class:`pymongo.MongoClient`.

    A malformed ``MONGODB_URI`` (bad port, failed SRV lookup, unknown
    option) is reported as :class:`ConfigurationError`.
    """
    global _client
    if _client is None:
        if not MONGODB_URI:
            raise ConfigurationError("MONGODB_URI is not set")
        try:
            _client = MongoClient(MONGODB_URI)
        except (ValueError, TypeError, PyMongoError) as exc:
            raise ConfigurationError(f"MONGODB_URI is invalid: {exc}") from exc
    return _client


def get_database() -> Database:
    """Return the configured application database."""
    return get_mongo_client()[MONGODB_DATABASE]

__all__ = ["get_mongo_client", "get_database"]
