"""Class Instance Domain Entity

One scheduled occurrence of a class template. Only SCHEDULED instances
receive venue/template change cascades.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from sqlmodel import Field, Column
from sqlalchemy import JSON
from src.domain.base import BaseModel, generate_uuid


class ClassInstanceStatus(str, Enum):
    SCHEDULED = "scheduled"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class ClassInstance(BaseModel, table=True):
    __tablename__ = "class_instances"

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    template_id: str = Field(index=True)
    venue_id: str = Field(index=True)
    business_id: str = Field(index=True)

    status: ClassInstanceStatus = Field(default=ClassInstanceStatus.SCHEDULED, index=True)
    start_time: datetime
    end_time: datetime

    # Copied from the template, kept in sync while scheduled
    name: str
    description: Optional[str] = Field(default=None)
    instructor: Optional[str] = Field(default=None)

    # Instance-level overrides; None falls back to the template
    price: Optional[int] = Field(default=None, description="Price override in cents")
    requires_confirmation: Optional[bool] = Field(default=None)
    cancellation_window_hours: Optional[int] = Field(default=None)
    questionnaire: Optional[List[Dict[str, Any]]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    discount_rules: Optional[List[Dict[str, Any]]] = Field(default=None, sa_column=Column(JSON, nullable=True))

    capacity: Optional[int] = Field(default=None)
    booked_count: int = Field(default=0)

    template_snapshot: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    venue_snapshot: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))

    deleted: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
