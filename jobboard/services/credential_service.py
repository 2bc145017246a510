"""Credential store for registered job board identities.

Identities live in the ``users`` MongoDB collection when ``ENABLE_MONGODB`` is
set and in :mod:`jobboard.storage` otherwise. Passwords are stored and
compared in plaintext. This is a known security gap inherited from the first
version of the job board and must be replaced with salted hashing before the
service holds real accounts.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from jobboard import database, storage
from jobboard.errors import ConflictError, ValidationError

logger = logging.getLogger(__name__)


def _get_users_collection() -> Optional[Collection]:
    """Return the MongoDB users collection, or None when MongoDB is disabled."""
    if not database.mongodb_enabled():
        return None
    return database.get_database()["users"]


def create_indexes() -> None:
    """Create the unique indexes backing id lookups and the email constraint."""
    collection = _get_users_collection()
    if collection is None:
        return
    collection.create_index("id", unique=True)
    collection.create_index("email", unique=True)


def parse_dob(value: Any) -> date:
    """Parse an ISO ``YYYY-MM-DD`` date of birth."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError("Date of birth must be formatted as YYYY-MM-DD") from None


def calculate_age(dob: date, today: Optional[date] = None) -> int:
    """Return the age in whole years on ``today``.

    One year is subtracted when today's month/day precedes the birth
    month/day, so 2000-06-15 is 23 on 2024-06-14 and 24 on 2024-06-15.
    """
    today = today or date.today()
    age = today.year - dob.year
    if (today.month, today.day) < (dob.month, dob.day):
        age -= 1
    return age


def public_identity(user: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``user`` without the password and storage ids."""
    return {key: value for key, value in user.items() if key not in ("password", "_id")}


def find_by_email_and_password(email: str, password: str) -> Optional[Dict[str, Any]]:
    """Return the identity whose email and password both match exactly."""
    collection = _get_users_collection()
    if collection is None:
        with storage.lock:
            for user in storage.users.values():
                if user["email"] == email and user["password"] == password:
                    return dict(user)
        return None

    user = collection.find_one({"email": email, "password": password})
    if user:
        user.pop("_id", None)
    return user


def create_user(
    name: str,
    email: str,
    password: str,
    dob: Any,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """
    Register a new identity.

    Args:
        name: Display name
        email: Email address, unique across identities (case-sensitive)
        password: Plaintext password
        dob: Date of birth as a ``date`` or an ISO ``YYYY-MM-DD`` string
        today: Reference date for the age calculation (defaults to today)

    Returns:
        The stored identity, including the password

    Raises:
        ValidationError: A field is missing or the date of birth is invalid
        ConflictError: The email is already registered
    """
    if not name or not email or not password or not dob:
        raise ValidationError("Missing required fields")
    if not all(isinstance(value, str) for value in (name, email, password)):
        raise ValidationError("Name, email and password must be strings")

    birth_date = parse_dob(dob)
    age = calculate_age(birth_date, today)
    if age < 0:
        raise ValidationError("Date of birth cannot be in the future")

    user = {
        "id": str(uuid.uuid4()),
        "name": name,
        "email": email,
        "password": password,
        "dob": birth_date.isoformat(),
        "age": age,
    }

    collection = _get_users_collection()
    if collection is None:
        with storage.lock:
            if any(existing["email"] == email for existing in storage.users.values()):
                raise ConflictError("User with this email already exists")
            storage.users[user["id"]] = user
        logger.info("Registered user %s", user["id"])
        return dict(user)

    if collection.find_one({"email": email}, {"_id": 1}):
        raise ConflictError("User with this email already exists")
    try:
        collection.insert_one(dict(user))
    except DuplicateKeyError:
        # Lost a race against a concurrent signup for the same email.
        raise ConflictError("User with this email already exists") from None

    logger.info("Registered user %s", user["id"])
    return user


def list_users() -> List[Dict[str, Any]]:
    """Return every registered identity in registration order."""
    collection = _get_users_collection()
    if collection is None:
        with storage.lock:
            return [dict(user) for user in storage.users.values()]

    users = list(collection.find({}))
    for user in users:
        user.pop("_id", None)
    return users
