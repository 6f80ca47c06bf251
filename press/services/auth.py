"""Principal resolution for bearer tokens."""

from press.managers.token_manager import decode_access_token
from press.models import UserDB
from press.repositories import UserRepository


async def resolve_principal(token: str, users: UserRepository) -> UserDB | None:
    """
    Resolve the user a bearer token was issued to.

    Args:
        token: Encoded access token
        users: User repository

    Returns:
        UserDB | None: The user, or None if the token is invalid or the
        user no longer exists
    """
    token_data = decode_access_token(token)
    if token_data is None:
        return None
    return await users.get_by_id(token_data.user_id)
