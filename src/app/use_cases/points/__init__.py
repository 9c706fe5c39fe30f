from .add_points import AddPoints, RedeemPoints
from .dtos import AddPointsCommandDTO, RedeemPointsCommandDTO, PointsResponseDTO

__all__ = [
    "AddPoints",
    "RedeemPoints",
    "AddPointsCommandDTO",
    "RedeemPointsCommandDTO",
    "PointsResponseDTO",
]
