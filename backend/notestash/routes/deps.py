"""
Shared FastAPI dependencies: the store handle and caller identity resolution.

Identity model:
    The caller names themselves with the X-User-Email header. The header is
    resolved to a user record through the email index before any note or
    profile operation runs:

        no header        → AuthenticationRequiredError (401)
        unknown email    → NotFoundError (404), short-circuits the request
        registered email → UserRecord handed to the route
"""

from typing import Optional

from fastapi import Depends, Header

from notestash.exceptions import AuthenticationRequiredError
from notestash.schemas.user import UserRecord
from notestash.services.user_service import user_service
from notestash.store import KeyValueStore, kv_store


def get_store() -> KeyValueStore:
    """The app-wide store. Overridden in tests with one bound to a scratch database."""
    return kv_store


async def get_current_user(
    x_user_email: Optional[str] = Header(
        default=None,
        description="Email of the calling user",
    ),
    store: KeyValueStore = Depends(get_store),
) -> UserRecord:
    if not x_user_email or not x_user_email.strip():
        raise AuthenticationRequiredError()
    return await user_service.resolve_identity(store, x_user_email.strip())
