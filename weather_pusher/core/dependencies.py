from fastapi import Request

from weather_pusher.services.pipeline import PushPipeline
from weather_pusher.services.scheduler import PushScheduler


def get_pipeline(request: Request) -> PushPipeline:
    """
    FastAPI dependency returning the process-wide push pipeline.

    The instance is created once in the application lifespan and shared
    with the scheduler.
    """
    return request.app.state.pipeline


def get_scheduler(request: Request) -> PushScheduler:
    """
    FastAPI dependency returning the process-wide push scheduler.
    """
    return request.app.state.scheduler
