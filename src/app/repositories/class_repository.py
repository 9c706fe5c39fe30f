"""Class Template / Class Instance Repository Interfaces"""

from abc import ABC, abstractmethod
from typing import List, Optional
from src.domain.class_instance import ClassInstance
from src.domain.class_template import ClassTemplate


class ClassTemplateRepository(ABC):

    @abstractmethod
    async def get_by_id(self, template_id: str) -> Optional[ClassTemplate]:
        pass


class ClassInstanceRepository(ABC):
    """
    Repository interface for ClassInstance reads

    The list_scheduled_* queries feed the venue / template cascades and only
    return SCHEDULED, non-deleted instances.
    """

    @abstractmethod
    async def get_by_id(self, instance_id: str, for_update: bool = False) -> Optional[ClassInstance]:
        """
        Retrieve instance by ID

        Args:
            instance_id: Instance ID
            for_update: If True, lock the row (capacity checks)

        Returns:
            ClassInstance if found, None otherwise
        """
        pass

    @abstractmethod
    async def list_scheduled_by_venue(self, venue_id: str) -> List[ClassInstance]:
        pass

    @abstractmethod
    async def list_scheduled_by_template(self, template_id: str) -> List[ClassInstance]:
        pass
