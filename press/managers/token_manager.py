"""
Author access tokens.

Tokens are minted out of band (``scripts/create_author.py``) and only
checked here; the API has no sign-in endpoint.
"""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

from jose import JWTError, jwt

from press.configs import settings
from press.schemas.auth import TokenData

ACCESS_TOKEN_TYPE = "access"


def _key() -> str:
    return settings.SECRET_KEY.get_secret_value()


def create_access_token(user_id: int, expires_delta: timedelta | None = None) -> str:
    """Sign a token whose subject is the author's id."""
    issued = datetime.now(UTC)
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {
        "sub": str(user_id),
        "jti": uuid4().hex,
        "iat": issued,
        "exp": issued + lifetime,
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
        "type": ACCESS_TOKEN_TYPE,
    }
    return jwt.encode(claims, _key(), algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> TokenData | None:
    """
    Verify signature, expiry, issuer and audience.

    Returns:
        TokenData | None: ``None`` for any token that is not a well-formed
        access token for a numeric author id.
    """
    try:
        claims = jwt.decode(
            token,
            _key(),
            algorithms=[settings.ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
        )
    except JWTError:
        return None

    subject = claims.get("sub")
    if claims.get("type") != ACCESS_TOKEN_TYPE or not claims.get("jti"):
        return None
    if not isinstance(subject, str) or not subject.isdigit():
        return None

    return TokenData(user_id=int(subject), jti=claims["jti"], token_type=ACCESS_TOKEN_TYPE)
