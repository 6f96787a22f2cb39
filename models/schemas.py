from typing import Optional
from pydantic import BaseModel, Field


class DeployStatusResponse(BaseModel):
    model_config = {"populate_by_name": True}
    state: Optional[str] = Field(None, description="Netlify deploy state (ready, building, error, unknown)")
    error: Optional[str] = None
    created_at: Optional[str] = Field(None, alias="createdAt")
    published_at: Optional[str] = Field(None, alias="publishedAt")
    deploy_time: Optional[int] = Field(None, alias="deployTime")


class ErrorResponse(BaseModel):
    error: str
