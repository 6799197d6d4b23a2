from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

BackendStatus = Literal["pending", "in_progress", "completed", "cancelled", "on_hold"]
DisplayStatus = Literal["not_started", "in_progress", "completed", "cancelled", "on_hold"]
DisplayPriority = Literal["low", "medium", "high", "urgent"]
EventType = Literal["task", "event", "reminder"]
LoginMethod = Literal["token", "session"]


class CategoryRef(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    color_hex: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, value):
        return str(value)


class Category(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    name: str
    color: Optional[str] = Field(None, validation_alias=AliasChoices("color", "color_hex"))
    description: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, value):
        return str(value)


class BackendTask(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    description: str = ""
    category: Optional[CategoryRef] = None
    tags: List[str] = Field(default_factory=list)

    deadline: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    specific_time: Optional[datetime] = None

    priority: int = 3
    urgency: int = 3
    status: str = "pending"
    completion_percentage: int = 0

    location: str = ""
    required_tools: List[str] = Field(default_factory=list)

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, value):
        return str(value)

    @field_validator("description", "location", mode="before")
    @classmethod
    def _none_as_blank(cls, value):
        return "" if value is None else value

    @field_validator("tags", "required_tools", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return [] if value is None else value

    @field_validator("priority", "urgency", mode="before")
    @classmethod
    def _default_level(cls, value):
        return 3 if value in (None, "") else value

    @field_validator("completion_percentage", mode="before")
    @classmethod
    def _default_progress(cls, value):
        return 0 if value in (None, "") else value

    @field_validator("category", mode="before")
    @classmethod
    def _blank_category(cls, value):
        # The backend may send a bare id instead of the nested object.
        if value in (None, "") or not isinstance(value, dict):
            return None
        return value


class CalendarEvent(BaseModel):
    id: str = ""
    title: str
    description: Optional[str] = None
    date: datetime
    time: Optional[str] = None

    deadline: Optional[datetime] = None
    duration: Optional[int] = None
    priority: DisplayPriority = "medium"
    status: DisplayStatus = "not_started"
    category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    location: Optional[str] = None
    color: Optional[str] = None
    type: EventType = "task"
    completed: bool = False
    progress: Optional[int] = Field(None, ge=0, le=100)


class TaskWritePayload(BaseModel):
    name: str
    description: str = ""
    category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    deadline: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    specific_time: Optional[datetime] = None
    priority: int = 3
    urgency: int = 3
    location: str = ""
    required_tools: Optional[List[str]] = None
    status: Optional[BackendStatus] = None
    completion_percentage: Optional[int] = None

    def to_request(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


class TaskStats(BaseModel):
    model_config = ConfigDict(extra="ignore")

    total: int = 0
    pending: int = 0
    completed: int = 0
    in_progress: int = 0
    overdue: int = 0
    completion_rate: float = 0

    @field_validator("*", mode="before")
    @classmethod
    def _none_as_zero(cls, value):
        return 0 if value is None else value


class VerifyResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    user_id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    login_method: Optional[str] = None
    has_gmail_access: Optional[bool] = False

    @field_validator("user_id", mode="before")
    @classmethod
    def _id_as_str(cls, value):
        return str(value)


class User(BaseModel):
    id: str
    email: str
    name: str
    first_name: str
    last_name: str = ""
    avatar: str
    login_method: LoginMethod
    has_gmail_access: bool = False
