"""
Models for presentation layer communication
"""

from .base import BaseModel
from .requests import (
    # Schedules
    AddScheduleRequest,
    ScheduleIdRequest,
    # Filters
    SetPriorityFilterRequest,
    SetSearchTextRequest,
    SetStatusFilterRequest,
    # Auth
    SignInRequest,
    SignUpRequest,
    UpdateScheduleRequest,
)

__all__ = [
    # Base
    "BaseModel",
    # Filters
    "SetSearchTextRequest",
    "SetStatusFilterRequest",
    "SetPriorityFilterRequest",
    # Schedules
    "AddScheduleRequest",
    "UpdateScheduleRequest",
    "ScheduleIdRequest",
    # Auth
    "SignInRequest",
    "SignUpRequest",
]
