from weather_pusher.core.db import engine
from weather_pusher.models import Base


async def init_db() -> None:
    """
    Initialize the database schema.

    Creates the `weather_observations` table if it does not already exist.

    Notes:
    - This uses `Base.metadata.create_all`, which is suitable for
      development and single-table deployments.
    - In production environments, database migrations should be handled
      using a migration tool such as Alembic.
    """
    async with engine.begin() as conn:
        # Run the synchronous SQLAlchemy `create_all` operation
        # inside an asynchronous context.
        await conn.run_sync(Base.metadata.create_all)
