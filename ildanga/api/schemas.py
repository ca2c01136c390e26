"""API request/response models."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from ildanga.config.settings import ProviderSnapshot


class GeneratePlanRequest(BaseModel):
    """Loose body for POST /api/generate-plan.

    Shape checks happen in the planner adapter so that a missing key is
    reported before a malformed body.
    """

    destination: Optional[Any] = Field(default=None, description="{name, province, slogan, highlights}")
    duration: Optional[Any] = Field(default=None, description="여행 일수")
    attractions: Optional[Any] = None
    restaurants: Optional[Any] = None


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = ""


class RegionListResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    items: list[dict[str, Any]] = Field(default_factory=list)
    total_count: int = Field(default=0, alias="totalCount")


class DiagnosticsResponse(BaseModel):
    providers: ProviderSnapshot
    regions: int = 0
