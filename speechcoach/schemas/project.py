from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import ConfigDict, Field

from speechcoach.schemas.analysis import CamelModel


class ProjectCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None


class ProjectUpdate(CamelModel):
    # only fields the client actually sent are applied (model_fields_set)
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    vibe: str | None = Field(default=None, max_length=255)
    strict: Annotated[bool, Field(strict=True)] | None = None
    timeframe: Annotated[int, Field(strict=True, ge=0)] | None = Field(
        default=None, description="Target duration in milliseconds, 0 or null for no target"
    )


class ProjectOut(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    name: str
    description: str | None = None
    vibe: str | None = None
    strict: bool
    timeframe: int
    created_at: datetime
    updated_at: datetime


class ProjectResponse(CamelModel):
    success: bool = True
    project: ProjectOut


class ProjectListResponse(CamelModel):
    projects: list[ProjectOut]
