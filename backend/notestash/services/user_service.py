"""
NoteStash Backend: User Service (Identity Store)
=================================================

What:  Owns user profile records and the email index.
Who:   Called by the auth routes and by the identity-resolution dependency.

Storage Layout:
    (USER#<id>,    PROFILE)  email, password_hash, created_at, updated_at
    (EMAIL#<email>, EMAIL)   user_id

Why an email index:
    The profile is keyed by user id, so finding a user by email would
    otherwise mean scanning every record. The index entry turns that into
    two keyed reads. It is written in the same transaction as the profile,
    conditional on neither key existing, which also makes email uniqueness
    a store-enforced invariant: two concurrent registrations for one email
    cannot both succeed.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from notestash.exceptions import AlreadyExistsError, InvalidCredentialsError, NotFoundError
from notestash.models.item import Item
from notestash.models.keys import (
    EMAIL_ENTITY,
    EMAIL_SK,
    PROFILE_SK,
    USER_ENTITY,
    USER_PREFIX,
    email_pk,
    new_id,
    strip_prefix,
    user_pk,
)
from notestash.schemas.common import MessageResponse
from notestash.schemas.user import UserRecord, UserResponse
from notestash.services import security
from notestash.store import ConditionalCheckFailed, KeyValueStore

logger = logging.getLogger(__name__)


def _to_record(item: Item) -> UserRecord:
    return UserRecord(
        id=strip_prefix(item.pk, USER_PREFIX),
        email=item.email,
        password_hash=item.password_hash,
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


class UserService:
    """
    Business logic for user accounts.

    Stateless: the store is passed in on every call. Password hashing runs in
    a worker thread because bcrypt is deliberately slow and CPU-bound.
    """

    async def create_user(self, store: KeyValueStore, email: str, password: str) -> UserResponse:
        """
        Register a new account.

        Raises:
            AlreadyExistsError: The email is already registered (or, with
                negligible probability, the generated id collided).
        """
        user_id = new_id()
        password_hash = await asyncio.to_thread(security.hash_password, password)
        now = datetime.now(timezone.utc)

        profile = {
            "pk": user_pk(user_id),
            "sk": PROFILE_SK,
            "entity_type": USER_ENTITY,
            "email": email,
            "password_hash": password_hash,
            "created_at": now,
            "updated_at": now,
        }
        index_entry = {
            "pk": email_pk(email),
            "sk": EMAIL_SK,
            "entity_type": EMAIL_ENTITY,
            "email": email,
            "user_id": user_id,
            "created_at": now,
        }

        try:
            await store.transact_put([profile, index_entry])
        except ConditionalCheckFailed:
            raise AlreadyExistsError(resource="user", message="User already exists")

        logger.info("User created: %s", user_id)
        return UserResponse(id=user_id, email=email, created_at=now)

    async def find_user_by_email(self, store: KeyValueStore, email: str) -> Optional[UserRecord]:
        """Resolve an email to its user record via the index. None if unknown."""
        entry = await store.get(email_pk(email), EMAIL_SK)
        if entry is None:
            return None

        user = await self.get_user_by_id(store, entry.user_id)
        if user is None:
            # Index points at a missing profile; treat the email as unregistered
            logger.warning("Email index entry references missing user %s", entry.user_id)
        return user

    async def get_user_by_id(self, store: KeyValueStore, user_id: str) -> Optional[UserRecord]:
        item = await store.get(user_pk(user_id), PROFILE_SK)
        return _to_record(item) if item is not None else None

    async def update_password(
        self, store: KeyValueStore, email: str, new_password: str
    ) -> MessageResponse:
        """
        Replace the password hash of the account registered under `email`.

        Raises:
            NotFoundError: No account uses this email.
        """
        user = await self.find_user_by_email(store, email)
        if user is None:
            raise NotFoundError(resource="user")

        password_hash = await asyncio.to_thread(security.hash_password, new_password)
        updated = await store.update(
            user_pk(user.id),
            PROFILE_SK,
            {"password_hash": password_hash, "updated_at": datetime.now(timezone.utc)},
        )
        if updated is None:
            raise NotFoundError(resource="user", resource_id=user.id)

        logger.info("Password updated for user %s", user.id)
        return MessageResponse(message="Password updated successfully")

    async def verify_password(self, plain_password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(security.verify_password, plain_password, password_hash)

    async def authenticate(self, store: KeyValueStore, email: str, password: str) -> UserRecord:
        """
        Check login credentials.

        Raises:
            InvalidCredentialsError: Unknown email or wrong password (same
                error for both).
        """
        user = await self.find_user_by_email(store, email)
        if user is None or not await self.verify_password(password, user.password_hash):
            raise InvalidCredentialsError()
        return user

    async def resolve_identity(self, store: KeyValueStore, email: str) -> UserRecord:
        """
        Turn a caller-supplied email into a user record.

        Raises:
            NotFoundError: The email is not registered. Every downstream
                operation is short-circuited by this.
        """
        user = await self.find_user_by_email(store, email)
        if user is None:
            raise NotFoundError(resource="user")
        return user


user_service = UserService()
