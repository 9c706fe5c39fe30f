from .book_class import BookClass
from .price_booking import PriceBooking
from .transition_booking import TransitionBooking
from .dtos import (
    BookClassCommandDTO,
    BookingResponseDTO,
    PriceQuoteCommandDTO,
    PriceQuoteDTO,
    TransitionBookingCommandDTO,
    TransitionResultDTO,
)

__all__ = [
    "BookClass",
    "PriceBooking",
    "TransitionBooking",
    "BookClassCommandDTO",
    "BookingResponseDTO",
    "PriceQuoteCommandDTO",
    "PriceQuoteDTO",
    "TransitionBookingCommandDTO",
    "TransitionResultDTO",
]
