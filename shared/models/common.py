"""Common Pydantic models shared across services."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class HealthStatus(str, Enum):
    """Health status enum."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    DEGRADED = "degraded"


class CatFact(BaseModel):
    """Payload returned by the fact API."""

    fact: str = Field(..., description="Fact text")
    length: int = Field(..., description="Fact length in characters", ge=0)

    model_config = ConfigDict(frozen=True)

    @field_validator("fact")
    @classmethod
    def validate_fact(cls, v: str) -> str:
        """Validate the fact is not blank."""
        if not v.strip():
            raise ValueError("fact cannot be blank")
        return v

    @property
    def category(self) -> str:
        """Length bucket used for tags and metrics."""
        return "long" if self.length > 100 else "short"

    def preview(self, size: int = 50) -> str:
        return self.fact[:size] + "..."


class FactResponse(BaseModel):
    """Response body of the home endpoint."""

    fact: str = Field(..., description="Fact text or fallback message")


class ServiceInfo(BaseModel):
    """Service information model."""

    status: HealthStatus = Field(..., description="Service health status")
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="Service version")
    environment: Optional[str] = Field(None, description="Deployment environment")

    model_config = ConfigDict(use_enum_values=True)
