from .submit_review import SubmitReview
from .dtos import ReviewResponseDTO, SubmitReviewCommandDTO

__all__ = ["SubmitReview", "ReviewResponseDTO", "SubmitReviewCommandDTO"]
