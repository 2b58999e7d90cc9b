from typing import Literal

from pydantic import BaseModel, Field

from weather_pusher.schemas.observations import PersistedRow


class PushResponse(BaseModel):
    """
    Response payload for a successful on-demand push.
    """
    status: Literal["pushed"] = "pushed"
    data: PersistedRow


class PushErrorResponse(BaseModel):
    """
    Response payload for a push that ran and failed.
    """
    status: Literal["error"] = "error"
    stage: str = Field(..., description="Pipeline stage that failed (fetch, normalize, persist)")
    error: str = Field(..., description="Error detail")


class StartResponse(BaseModel):
    status: Literal["started"] = "started"
    interval_seconds: float
    already_running: bool = Field(
        False, description="True when the schedule was already running and nothing changed"
    )


class StopResponse(BaseModel):
    status: Literal["stopped", "not_running"]
