"""Task models."""

from enum import Enum
from typing import Optional, Literal
from pydantic import BaseModel, Field


class TaskStatus(str, Enum):
    PENDING = "Pending"
    DONE = "Done"


class TaskPriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class RelatedRecord(BaseModel):
    """Record a task is about."""
    type: Literal["contact", "listing", "offer"]
    id: str
    label: str


class TaskDraft(BaseModel):
    """Task fields produced by the CSV import before hydration."""
    title: str = Field(..., min_length=1, description="Task title")
    due_date: str = Field(default="", description="Due date (yyyy-MM-dd) or empty")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="Status: Pending, Done")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Priority: Low, Medium, High")
    metadata: dict[str, str] = Field(default_factory=dict, description="Original import row, verbatim")


class Task(TaskDraft):
    """Task model."""
    id: str = Field(..., description="Task ID (text)")
    agency_id: str = Field(..., description="Agency ID (text FK)")
    assigned_to: str = Field(..., description="Assigned user ID (text FK)")
    related_to: Optional[RelatedRecord] = Field(None, description="Linked contact, listing or offer")
    created_at: Optional[str] = None
