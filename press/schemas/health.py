from pydantic import BaseModel


class HealthCheckResponse(BaseModel):
    """Liveness payload."""

    version: str
    status: str
    environment: str
    timestamp: str
