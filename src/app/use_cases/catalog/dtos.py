"""Data Transfer Objects for Catalog Use Cases"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class UpdateVenueCommandDTO(BaseModel):
    """Only fields that are set are written; address parts merge into the stored address"""

    venue_id: str
    name: Optional[str] = None
    address: Optional[Dict[str, Any]] = None
    image_ids: Optional[List[str]] = None
    deleted: Optional[bool] = None


class UpdateClassTemplateCommandDTO(BaseModel):
    template_id: str
    name: Optional[str] = None
    description: Optional[str] = None
    instructor: Optional[str] = None
    image_ids: Optional[List[str]] = None
    price: Optional[int] = Field(default=None, ge=0, description="Base price in cents")
    requires_confirmation: Optional[bool] = None
    cancellation_window_hours: Optional[int] = Field(default=None, ge=0)
    questionnaire: Optional[List[Dict[str, Any]]] = None
    discount_rules: Optional[List[Dict[str, Any]]] = None
    deleted: Optional[bool] = None


class CatalogUpdateResultDTO(BaseModel):
    entity_id: str
    updated_fields: List[str]
    follow_up_kinds: List[str] = Field(default_factory=list)
