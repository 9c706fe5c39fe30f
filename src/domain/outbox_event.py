"""Outbox Event Domain Entity

Durable queue of follow-up work. Rows are written in the same unit of work as
the change that caused them and processed later by the outbox worker, so slow
or failing collaborators never block or roll back the originating write.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional
from sqlmodel import Field, Column
from sqlalchemy import JSON, Text
from src.domain.base import BaseModel, generate_uuid


class FollowUpKind(str, Enum):
    NOTIFICATION = "notification"
    REVIEW_MODERATION = "review_moderation"
    PROFILE_IMAGE_MODERATION = "profile_image_moderation"
    VENUE_GEOCODING = "venue_geocoding"


class OutboxStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"        # Not retried by the core


class OutboxEvent(BaseModel, table=True):
    __tablename__ = "outbox_events"

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    kind: FollowUpKind = Field(index=True)
    payload: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    status: OutboxStatus = Field(default=OutboxStatus.PENDING, index=True)
    attempts: int = Field(default=0)
    error: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    created_at: datetime = Field(default_factory=datetime.utcnow)
    processed_at: Optional[datetime] = Field(default=None)

    @property
    def notification_type(self) -> Optional[str]:
        if self.kind != FollowUpKind.NOTIFICATION:
            return None
        return self.payload.get("type")
