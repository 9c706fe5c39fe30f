from .update_class_template import UpdateClassTemplate
from .update_venue import UpdateVenue
from .dtos import CatalogUpdateResultDTO, UpdateClassTemplateCommandDTO, UpdateVenueCommandDTO

__all__ = [
    "UpdateClassTemplate",
    "UpdateVenue",
    "CatalogUpdateResultDTO",
    "UpdateClassTemplateCommandDTO",
    "UpdateVenueCommandDTO",
]
