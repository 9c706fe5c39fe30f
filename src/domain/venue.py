"""Venue Domain Entity

Physical location where classes take place. Scheduled class instances carry a
snapshot of the venue fields they display.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlmodel import Field, Column
from sqlalchemy import JSON
from src.domain.base import BaseModel, generate_uuid

ADDRESS_FIELDS = ("street", "city", "state", "zip_code", "country")


class Venue(BaseModel, table=True):
    __tablename__ = "venues"

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    business_id: str = Field(index=True)
    name: str

    address: Dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
        description="street, city, state, zip_code, country"
    )

    image_ids: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    latitude: Optional[float] = Field(default=None)
    longitude: Optional[float] = Field(default=None)

    # Aggregates over approved reviews
    rating: Optional[float] = Field(default=None)
    review_count: int = Field(default=0)

    deleted: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    def full_address(self) -> str:
        address = self.address or {}
        return " ".join(str(address[part]) for part in ADDRESS_FIELDS if address.get(part))
