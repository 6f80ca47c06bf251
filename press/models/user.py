"""User database model using SQLModel."""

from datetime import datetime
from typing import cast

from pydantic import ConfigDict
from sqlalchemy import DateTime
from sqlalchemy.orm import declared_attr
from sqlmodel import Column, Field, SQLModel, String

from press.models.post import utc_now


class UserDB(SQLModel, table=True):
    """
    User database model for PostgreSQL.

    Users are the authors of posts. Only the display name is read by the
    publishing pipeline; credentials live with the external auth service.
    """

    __tablename__ = cast("declared_attr[str]", "users")

    id: int | None = Field(
        default=None,
        primary_key=True,
        description="User ID",
    )
    name: str = Field(
        sa_column=Column(String(100), nullable=False),
        description="Display name",
    )
    email: str = Field(
        sa_column=Column(String(255), unique=True, nullable=False, index=True),
        description="Email address (unique)",
    )

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
        description="Creation timestamp",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 1,
                "name": "Ana Souza",
                "email": "ana@example.com",
            },
        },
    )
