"""Class Template Domain Entity

Business-defined class definition. Instances are generated from templates and
keep their own copies of the displayed fields.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlmodel import Field, Column
from sqlalchemy import JSON
from src.domain.base import BaseModel, generate_uuid

DEFAULT_PRICE_CENTS = 1000


class ClassTemplate(BaseModel, table=True):
    """
    Class Template - Definition a business schedules instances from

    Domain Rules:
    - price is stored in cents
    - questionnaire and discount_rules are stored as plain JSON and copied by
      value into each booking at booking time
    """

    __tablename__ = "class_templates"

    id: str = Field(default_factory=generate_uuid, primary_key=True)
    business_id: str = Field(index=True)
    venue_id: str = Field(index=True)

    name: str
    description: Optional[str] = Field(default=None)
    instructor: Optional[str] = Field(default=None)
    image_ids: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    price: int = Field(default=DEFAULT_PRICE_CENTS, description="Base price in cents")
    requires_confirmation: bool = Field(default=False)
    cancellation_window_hours: int = Field(default=0)

    questionnaire: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    discount_rules: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    deleted: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
