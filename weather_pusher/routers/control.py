from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from weather_pusher.core.dependencies import get_pipeline, get_scheduler
from weather_pusher.schemas.control import (
    PushErrorResponse,
    PushResponse,
    StartResponse,
    StopResponse,
)
from weather_pusher.services.pipeline import PushPipeline
from weather_pusher.services.scheduler import PushScheduler

router = APIRouter(tags=["Control"])


@router.api_route(
    "/push-now",
    methods=["GET", "POST"],
    response_model=PushResponse,
    responses={500: {"model": PushErrorResponse, "description": "The push ran and failed"}},
    summary="Push one observation now",
    description=(
        "Fetches the current weather document, normalizes it and upserts it into the "
        "target row, outside the schedule cadence. The schedule state is not affected."
    ),
)
async def push_now(pipeline: PushPipeline = Depends(get_pipeline)):
    result = await pipeline.run_once()
    if result.ok:
        return PushResponse(data=result.row)

    body = PushErrorResponse(stage=result.error.stage, error=str(result.error.cause))
    return JSONResponse(status_code=500, content=body.model_dump())


@router.api_route(
    "/start",
    methods=["GET", "POST"],
    response_model=StartResponse,
    summary="Start the push schedule",
    description="Starts periodic pushes with one immediate push. Idempotent.",
)
async def start(scheduler: PushScheduler = Depends(get_scheduler)):
    already_running = scheduler.is_running()
    interval = scheduler.start()
    return StartResponse(interval_seconds=interval, already_running=already_running)


@router.api_route(
    "/stop",
    methods=["GET", "POST"],
    response_model=StopResponse,
    responses={400: {"model": StopResponse, "description": "The schedule was not running"}},
    summary="Stop the push schedule",
    description="Cancels future scheduled pushes. A push already in flight still completes.",
)
async def stop(scheduler: PushScheduler = Depends(get_scheduler)):
    if not scheduler.stop():
        return JSONResponse(status_code=400, content=StopResponse(status="not_running").model_dump())
    return StopResponse(status="stopped")
