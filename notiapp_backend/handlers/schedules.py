"""
Schedule command handlers
Read-only projection of the engine state plus the intents that drive it
"""

from typing import Any, Dict

from notiapp_backend.core.errors import RemoteError, ScheduleNotFoundError
from notiapp_backend.core.logger import get_logger
from notiapp_backend.models import (
    AddScheduleRequest,
    ScheduleIdRequest,
    SetPriorityFilterRequest,
    SetSearchTextRequest,
    SetStatusFilterRequest,
    UpdateScheduleRequest,
)
from notiapp_backend.system.runtime import get_runtime

from . import api_handler, error_response, success_response

logger = get_logger(__name__)


def _engine():
    return get_runtime().engine


def _view_data() -> Dict[str, Any]:
    return _engine().view().to_dict()


@api_handler(method="GET", path="/schedules")
async def get_schedule_view() -> Dict[str, Any]:
    """Get the current schedule list view.

    @returns Load state, filters, counts and the filtered schedules
    """
    try:
        return success_response(_view_data())
    except Exception as e:
        return error_response(e)


@api_handler(body=ScheduleIdRequest, path="/schedules/get")
async def get_schedule(body: ScheduleIdRequest) -> Dict[str, Any]:
    """Get one schedule from the loaded list (edit/detail screens).

    @param body - Request parameters including schedule ID.
    @returns The schedule, or an error when it is not in the loaded list
    """
    try:
        schedule = _engine().get_schedule(body.id)
    except Exception as e:
        return error_response(e)

    if schedule is None:
        return error_response(ScheduleNotFoundError())
    return success_response(schedule.to_dict())


@api_handler(body=SetSearchTextRequest, path="/schedules/search")
async def set_search_text(body: SetSearchTextRequest) -> Dict[str, Any]:
    """Update the search text and re-derive the visible list.

    @param body - Request parameters including the search text.
    @returns Updated view
    """
    try:
        _engine().set_search_text(body.text)
        return success_response(_view_data())
    except Exception as e:
        return error_response(e)


@api_handler(body=SetStatusFilterRequest, path="/schedules/filter/status")
async def set_status_filter(body: SetStatusFilterRequest) -> Dict[str, Any]:
    """Set the status filter ("all" or a status value).

    @param body - Request parameters including the status.
    @returns Updated view
    """
    try:
        _engine().set_status_filter(body.status)
        return success_response(_view_data())
    except Exception as e:
        return error_response(e)


@api_handler(body=SetPriorityFilterRequest, path="/schedules/filter/priority")
async def set_priority_filter(body: SetPriorityFilterRequest) -> Dict[str, Any]:
    """Set the priority filter ("all" or a priority value).

    @param body - Request parameters including the priority.
    @returns Updated view
    """
    try:
        _engine().set_priority_filter(body.priority)
        return success_response(_view_data())
    except Exception as e:
        return error_response(e)


@api_handler(path="/schedules/refresh")
async def refresh_schedules() -> Dict[str, Any]:
    """Re-fetch the signed-in user's schedules (pull to refresh).

    @returns Updated view; success is False when the fetch failed
    """
    try:
        engine = _engine()
        await engine.refresh()
        view = engine.view()
    except Exception as e:
        return error_response(e)

    if view.error:
        response = error_response(RemoteError(view.error))
        response["data"] = view.to_dict()
        return response
    return success_response(view.to_dict())


@api_handler(body=AddScheduleRequest, path="/schedules/add")
async def add_schedule(body: AddScheduleRequest) -> Dict[str, Any]:
    """Create a schedule for the signed-in user.

    @param body - Schedule fields; date defaults to today.
    @returns New schedule ID and the re-fetched view
    """
    try:
        schedule_id = await _engine().add_schedule(body.to_fields())
        logger.info(f"Schedule added: {schedule_id}")
        return success_response(
            {"id": schedule_id, "view": _view_data()},
            "Schedule created successfully!",
        )
    except Exception as e:
        return error_response(e)


@api_handler(body=UpdateScheduleRequest, path="/schedules/update")
async def update_schedule(body: UpdateScheduleRequest) -> Dict[str, Any]:
    """Edit a schedule; title and date are required.

    @param body - Schedule ID and fields.
    @returns Re-fetched view
    """
    try:
        await _engine().update_schedule(body.id, body.to_fields())
        return success_response(_view_data(), "Schedule updated successfully!")
    except Exception as e:
        return error_response(e)


@api_handler(body=ScheduleIdRequest, path="/schedules/complete")
async def complete_schedule(body: ScheduleIdRequest) -> Dict[str, Any]:
    """Mark a schedule as completed.

    @param body - Request parameters including schedule ID.
    @returns Re-fetched view
    """
    try:
        await _engine().mark_completed(body.id)
        return success_response(_view_data(), "Schedule marked as completed")
    except Exception as e:
        return error_response(e)


@api_handler(body=ScheduleIdRequest, method="DELETE", path="/schedules/delete")
async def remove_schedule(body: ScheduleIdRequest) -> Dict[str, Any]:
    """Delete a schedule.

    @param body - Request parameters including schedule ID.
    @returns Re-fetched view
    """
    try:
        await _engine().delete_schedule(body.id)
        logger.info(f"Schedule deleted: {body.id}")
        return success_response(_view_data(), "Schedule deleted")
    except Exception as e:
        return error_response(e)
