from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from weather_pusher.repositories.weather_observation_repository import WeatherObservationRepository
from weather_pusher.schemas.observations import PersistedRow
from weather_pusher.services.errors import PipelineError
from weather_pusher.services.normalizer import normalize
from weather_pusher.services.providers.weather_client import WeatherClient

logger = logging.getLogger(__name__)


@dataclass
class PushResult:
    """
    Outcome of one push run: either the stored row or the tagged error.
    """
    row: Optional[PersistedRow] = None
    error: Optional[PipelineError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class PushPipeline:
    """
    Fetch -> normalize -> upsert, as one operation.

    The same instance serves scheduled ticks and on-demand pushes, so
    both paths behave identically.
    """

    def __init__(
        self,
        client: WeatherClient,
        session_factory: async_sessionmaker[AsyncSession],
        target_id: str,
    ):
        self.client = client
        self.session_factory = session_factory
        self.target_id = target_id

    async def run_once(self) -> PushResult:
        """
        Run the pipeline once.

        Never raises: any failure is logged and returned as a
        `PushResult` whose `error` names the stage that failed.
        """
        stage = "fetch"
        try:
            raw = await self.client.fetch_raw()

            stage = "normalize"
            observation = normalize(raw)
            row = PersistedRow(id=self.target_id, **observation.model_dump())

            stage = "persist"
            async with self.session_factory() as session:
                stored = await WeatherObservationRepository(session).upsert_observation(row)
        except Exception as e:
            logger.error("Push failed at %s stage: %s", stage, e)
            return PushResult(error=PipelineError(stage, e))

        return PushResult(row=stored)
