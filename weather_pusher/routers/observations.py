from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from weather_pusher.core.db import get_db
from weather_pusher.core.dependencies import get_pipeline
from weather_pusher.repositories.weather_observation_repository import WeatherObservationRepository
from weather_pusher.schemas.observations import PersistedRow
from weather_pusher.services.pipeline import PushPipeline

router = APIRouter(prefix="/observations", tags=["Observations"])


@router.get(
    "/current",
    response_model=PersistedRow,
    summary="Current observation",
    description="Returns the observation stored under the configured target id.",
)
async def current_observation(
    db: AsyncSession = Depends(get_db),
    pipeline: PushPipeline = Depends(get_pipeline),
):
    row = await WeatherObservationRepository(db).get_by_id(pipeline.target_id)
    if row is None:
        raise HTTPException(status_code=404, detail="No observation pushed yet")
    return row
