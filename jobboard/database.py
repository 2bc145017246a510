"""MongoDB database configuration and connection management."""

from __future__ import annotations

import os
from typing import Optional

from pymongo import MongoClient
from pymongo.database import Database


# Global MongoDB client instance
_client: Optional[MongoClient] = None
_database: Optional[Database] = None


def mongodb_enabled() -> bool:
    """Return True when the ENABLE_MONGODB flag is switched on."""
    return os.getenv("ENABLE_MONGODB", "false").lower() == "true"


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client instance."""
    global _client
    if _client is None:
        mongo_uri = os.getenv("MONGODB_URI", "mongodb://localhost:27017/")
        _client = MongoClient(mongo_uri)
    return _client


def get_database() -> Database:
    """Get the MongoDB database instance."""
    global _database
    if _database is None:
        client = get_mongo_client()
        db_name = os.getenv("MONGODB_DATABASE", "job_board")
        _database = client[db_name]
    return _database

