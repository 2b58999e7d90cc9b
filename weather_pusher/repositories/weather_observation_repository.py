import logging
from typing import Optional

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from weather_pusher.models.weather_observation import WeatherObservation
from weather_pusher.schemas.observations import PersistedRow
from weather_pusher.services.errors import PersistError

logger = logging.getLogger(__name__)

# Dialects whose INSERT supports ON CONFLICT ... DO UPDATE ... RETURNING
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class WeatherObservationRepository:
    """
    Repository for the latest-observation row.

    This repository encapsulates all database operations related to
    `WeatherObservation` entities: the keyed upsert used by every push
    and the lookup used by the read endpoint.
    """

    def __init__(self, db: AsyncSession):
        """
        Initialize the repository with an active database session.

        Args:
            db: Asynchronous SQLAlchemy session.
        """
        self.db = db

    async def upsert_observation(self, row: PersistedRow) -> PersistedRow:
        """
        Insert or overwrite the observation stored under `row.id`.

        The write is a single `INSERT ... ON CONFLICT (id) DO UPDATE`
        statement, so there is no read-then-write window and concurrent
        pushes for the same id can never create a second row. The last
        statement to commit wins.

        Args:
            row: Observation to store, carrying its target identity.

        Returns:
            The row as stored.

        Raises:
            PersistError: if the store rejects the statement. The session is
                rolled back, nothing is partially applied.
        """
        dialect = self.db.get_bind().dialect.name
        insert = _UPSERT_INSERTS.get(dialect)
        if insert is None:
            raise PersistError(f"upsert is not supported for dialect '{dialect}'")

        table = WeatherObservation.__table__
        values = row.model_dump()
        stmt = insert(table).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.id],
            set_={name: stmt.excluded[name] for name in values if name != "id"},
        ).returning(*table.c)

        try:
            result = await self.db.execute(stmt)
            stored = result.mappings().one()
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistError(str(e)) from e

        logger.debug("Upserted observation id=%s observed_at=%s", row.id, row.observed_at)
        return PersistedRow.model_validate(dict(stored))

    async def get_by_id(self, observation_id: str) -> Optional[PersistedRow]:
        """
        Return the stored observation for `observation_id`, or None.
        """
        obs = await self.db.get(WeatherObservation, observation_id, populate_existing=True)
        if obs is None:
            return None
        return PersistedRow.model_validate(obs)
