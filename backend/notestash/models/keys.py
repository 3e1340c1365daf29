"""
Key construction for the single-table layout.

Every record lives at a composite key (pk, sk). The prefixes below keep the
three record kinds in disjoint namespaces:

    (USER#<user id>,  PROFILE)        user profile
    (USER#<user id>,  NOTE#<note id>) note owned by that user
    (EMAIL#<email>,   EMAIL)          email → user id index entry

Public identifiers (what the API returns and accepts) are the bare UUID hex
strings; prefixes are added and stripped only here.
"""

import uuid

USER_PREFIX = "USER#"
NOTE_PREFIX = "NOTE#"
EMAIL_PREFIX = "EMAIL#"

# Sort key sentinels
PROFILE_SK = "PROFILE"
EMAIL_SK = "EMAIL"

# entity_type attribute values
USER_ENTITY = "USER"
NOTE_ENTITY = "NOTE"
EMAIL_ENTITY = "EMAIL"


def new_id() -> str:
    """Random, collision-resistant identifier (UUID4, 32 hex chars)."""
    return uuid.uuid4().hex


def user_pk(user_id: str) -> str:
    return f"{USER_PREFIX}{user_id}"


def note_sk(note_id: str) -> str:
    return f"{NOTE_PREFIX}{note_id}"


def email_pk(email: str) -> str:
    # Emails are matched exactly; no case folding.
    return f"{EMAIL_PREFIX}{email}"


def strip_prefix(key: str, prefix: str) -> str:
    """Return the identifier part of a prefixed key."""
    if not key.startswith(prefix):
        raise ValueError(f"Key {key!r} does not start with {prefix!r}")
    return key[len(prefix):]
