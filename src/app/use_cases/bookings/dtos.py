"""Data Transfer Objects for Booking Use Cases

Pydantic models for command inputs and response outputs.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from src.domain.booking_status import BookingStatus
from src.domain.questionnaire import AnswerInput


class PriceQuoteCommandDTO(BaseModel):
    class_instance_id: str
    answers: List[AnswerInput] = Field(default_factory=list)


class PriceQuoteDTO(BaseModel):
    """All prices are cents; final_credits is what the ledger would charge"""

    class_instance_id: str
    original_price: int
    questionnaire_fees: int
    discount_amount: int
    final_price: int
    final_credits: Decimal
    applied_discount: Optional[Dict[str, Any]] = None


class BookClassCommandDTO(BaseModel):
    """
    Command DTO for booking a class instance

    Used as input to BookClass use case.
    """

    user_id: str = Field(..., description="Booking consumer")
    class_instance_id: str = Field(..., description="Instance to book")
    answers: List[AnswerInput] = Field(
        default_factory=list,
        description="Questionnaire answers; fees are always computed, never accepted"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "user_id": "usr_123",
                "class_instance_id": "ci_456",
                "answers": [
                    {"question_id": "equipment", "multi_select_answer": ["mat", "strap"]}
                ]
            }
        }


class BookingResponseDTO(BaseModel):
    booking_id: str
    status: str
    original_price: int
    final_price: int
    credits_paid: Decimal
    questionnaire_fees: int = 0
    discount_amount: int = 0
    applied_discount: Optional[Dict[str, Any]] = None
    ledger_transaction_id: Optional[str] = None
    balances: Dict[str, Decimal] = Field(default_factory=dict)
    notification_events: List[str] = Field(default_factory=list)
    already_booked: bool = Field(default=False, description="True when an active booking was returned")


class TransitionBookingCommandDTO(BaseModel):
    """
    Command DTO for changing a booking's status

    Used as input to TransitionBooking use case.
    """

    booking_id: str
    target_status: BookingStatus
    reason: Optional[str] = Field(default=None, description="Cancellation or rejection reason")


class TransitionResultDTO(BaseModel):
    booking_id: str
    previous_status: str
    new_status: str
    ledger_transaction_id: Optional[str] = None
    refunded_credits: Optional[Decimal] = None
    points_awarded: Optional[int] = None
    notification_events: List[str] = Field(default_factory=list)
