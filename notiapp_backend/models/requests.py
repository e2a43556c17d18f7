"""
Request models for schedule and auth intents
"""

from typing import Any, Dict, Optional

from .base import BaseModel

# ============================================================================
# Filter Request Models
# ============================================================================


class SetSearchTextRequest(BaseModel):
    """Request parameters for updating the search text.

    @property text - Free text matched against title, description and category.
    """

    text: str = ""


class SetStatusFilterRequest(BaseModel):
    """Request parameters for the status filter.

    @property status - "all" or one of pending, in-progress, completed, cancelled.
    """

    status: str = "all"


class SetPriorityFilterRequest(BaseModel):
    """Request parameters for the priority filter.

    @property priority - "all" or one of low, medium, high.
    """

    priority: str = "all"


# ============================================================================
# Schedule Request Models
# ============================================================================


class AddScheduleRequest(BaseModel):
    """Request parameters for creating a schedule.

    @property title - Required, at most 100 characters.
    @property date - YYYY-MM-DD; defaults to today when omitted.
    @property time - Optional HH:MM.
    @property description - Optional, at most 500 characters.
    @property priority - low | medium | high (default medium).
    @property status - pending | in-progress | completed | cancelled (default pending).
    @property category - general, work, personal, ... (default general).
    """

    title: str
    date: Optional[str] = None
    time: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    category: Optional[str] = None

    def to_fields(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=False, exclude_none=True)


class UpdateScheduleRequest(BaseModel):
    """Request parameters for editing a schedule.

    @property id - The schedule ID.
    @property title - Required.
    @property date - Required, YYYY-MM-DD.
    Remaining fields are only written when present.
    """

    id: str
    title: str
    date: str
    time: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    category: Optional[str] = None

    def to_fields(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=False, exclude_none=True, exclude={"id"})


class ScheduleIdRequest(BaseModel):
    """Request parameters addressing a single schedule.

    @property id - The schedule ID.
    """

    id: str


# ============================================================================
# Auth Request Models
# ============================================================================


class SignInRequest(BaseModel):
    """Request parameters for email/password sign in.

    @property email - Account email.
    @property password - Account password.
    """

    email: str
    password: str


class SignUpRequest(BaseModel):
    """Request parameters for creating an account.

    @property email - Account email.
    @property password - At least 6 characters.
    """

    email: str
    password: str
