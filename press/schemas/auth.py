from pydantic import BaseModel


class TokenData(BaseModel):
    """Token data schema for extracted token payload."""

    user_id: int
    jti: str
    token_type: str = "access"
