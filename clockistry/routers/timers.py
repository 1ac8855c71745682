"""Timer endpoints - time tracking operations."""
import asyncio
import json
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import StreamingResponse

from clockistry.database import get_store
from clockistry.errors import InvalidState, NotFound, TimerAlreadyRunning
from clockistry.events import broker
from clockistry.models.time_entry import (
    TimeEntry,
    TimeEntryCreate,
    TimerStart,
    TimerStatus,
    TimerUpdate,
)
from clockistry.routers.auth import get_current_user_id
from clockistry.services.timer_service import TimerService, elapsed_seconds


router = APIRouter(prefix="/timers", tags=["timers"])

KEEPALIVE_SECONDS = 15.0


async def get_timer_service(store=Depends(get_store)) -> TimerService:
    """Dependency building a TimerService over the configured store."""
    return TimerService(store, events=broker)


@router.post("/start", response_model=TimeEntry, status_code=status.HTTP_201_CREATED)
async def start_timer(
    timer_start: TimerStart,
    user_id: str = Depends(get_current_user_id),
    service: TimerService = Depends(get_timer_service),
):
    """
    Start a new timer.

    - Requires authentication
    - Only one timer can run at a time
    """
    try:
        return await service.start_timer(user_id=user_id, fields=timer_start)
    except TimerAlreadyRunning as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.post("/stop", response_model=TimeEntry)
async def stop_running_timer(
    user_id: str = Depends(get_current_user_id),
    service: TimerService = Depends(get_timer_service),
):
    """
    Stop the currently running timer.

    - Requires authentication
    - Must have a running timer
    """
    try:
        return await service.stop_running_timer(user_id=user_id)
    except NotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/current", response_model=TimerStatus)
async def get_current_timer(
    user_id: str = Depends(get_current_user_id),
    service: TimerService = Depends(get_timer_service),
):
    """
    Get the currently running timer, if any, with its elapsed seconds.

    - Requires authentication
    - Returns 404 if no timer is running
    """
    entry = await service.get_running_timer(user_id=user_id)

    if not entry:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No timer running")

    return TimerStatus(entry=entry, elapsed_seconds=elapsed_seconds(entry, service.clock()))


@router.get("/events")
async def timer_events(
    request: Request,
    user_id: str = Depends(get_current_user_id),
):
    """
    Stream timer changes for the authenticated user as server-sent events.

    Each event is named after the change (started, updated, stopped,
    created, deleted) and carries the entry as JSON data.
    """
    async def stream():
        async with broker.subscribe(user_id) as queue:
            while not await request.is_disconnected():
                try:
                    event = await asyncio.wait_for(queue.get(), timeout=KEEPALIVE_SECONDS)
                except asyncio.TimeoutError:
                    yield ": keep-alive\n\n"
                    continue
                yield f"event: {event['type']}\ndata: {json.dumps(event['entry'])}\n\n"

    return StreamingResponse(stream(), media_type="text/event-stream")


@router.get("", response_model=list[TimeEntry])
async def list_entries(
    project_id: Optional[str] = Query(None),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    user_id: str = Depends(get_current_user_id),
    service: TimerService = Depends(get_timer_service),
):
    """
    List time entries for the authenticated user.

    - Requires authentication
    - Optional filters: project_id, start_date, end_date
    - Results sorted by created_at descending (most recent first)
    """
    return await service.list_entries(
        user_id=user_id,
        project_id=project_id,
        start_date=start_date,
        end_date=end_date,
    )


@router.post("", response_model=TimeEntry, status_code=status.HTTP_201_CREATED)
async def create_entry(
    entry_create: TimeEntryCreate,
    user_id: str = Depends(get_current_user_id),
    service: TimerService = Depends(get_timer_service),
):
    """
    Create a manual time entry.

    - Requires authentication
    - Duration is calculated from start and end time
    - Without end_time the entry starts running
    """
    try:
        return await service.create_entry(user_id=user_id, entry_create=entry_create)
    except TimerAlreadyRunning as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except InvalidState as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/{entry_id}", response_model=TimeEntry)
async def get_entry(
    entry_id: str,
    user_id: str = Depends(get_current_user_id),
    service: TimerService = Depends(get_timer_service),
):
    """
    Get a specific time entry by ID.

    - Requires authentication
    - User must own the entry
    """
    try:
        return await service.get_entry(entry_id=entry_id, user_id=user_id)
    except NotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.patch("/{entry_id}", response_model=TimeEntry)
async def update_entry(
    entry_id: str,
    entry_update: TimerUpdate,
    user_id: str = Depends(get_current_user_id),
    service: TimerService = Depends(get_timer_service),
):
    """
    Update labels, description, tags or billable flag of a time entry.

    - Requires authentication
    - User must own the entry
    """
    try:
        return await service.update_timer(
            entry_id=entry_id,
            update=entry_update,
            user_id=user_id,
        )
    except NotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post("/{entry_id}/stop", response_model=TimeEntry)
async def stop_timer(
    entry_id: str,
    entry_update: Optional[TimerUpdate] = None,
    user_id: str = Depends(get_current_user_id),
    service: TimerService = Depends(get_timer_service),
):
    """
    Stop a specific timer, optionally relabelling it in the same write.

    - Requires authentication
    - User must own the entry
    - Stopping an already stopped entry returns it unchanged
    """
    try:
        return await service.stop_timer(
            entry_id=entry_id,
            user_id=user_id,
            update=entry_update,
        )
    except NotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.delete("/{entry_id}")
async def delete_entry(
    entry_id: str,
    user_id: str = Depends(get_current_user_id),
    service: TimerService = Depends(get_timer_service),
):
    """
    Delete a time entry.

    - Requires authentication
    - User must own the entry
    - Hard delete (permanent)
    """
    try:
        return await service.delete_entry(entry_id=entry_id, user_id=user_id)
    except NotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
