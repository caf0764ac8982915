"""Consul agent API response schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AgentService(BaseModel):
    """A service instance as listed by ``GET /v1/agent/services``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str = Field(alias="ID")
    service: str = Field(alias="Service")
    address: str = Field(default="", alias="Address")
    port: int = Field(default=0, alias="Port")
    tags: list[str] | None = Field(default=None, alias="Tags")
    meta: dict[str, str] | None = Field(default=None, alias="Meta")
