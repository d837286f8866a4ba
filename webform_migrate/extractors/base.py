"""Base legacy reader interface."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
import logging

from ..models.legacy import (
    LegacyComponent,
    LegacyEmail,
    LegacyForm,
    LegacySubmission,
)

logger = logging.getLogger(__name__)


class BaseLegacyReader(ABC):
    """
    Base class for readers of the legacy webform tables.

    Readers only ever read; every query is keyed by the legacy form's
    node id (nid).
    """

    def __init__(self):
        self._warnings: List[str] = []

    @abstractmethod
    def list_form_ids(self) -> List[int]:
        """
        List the node ids of all legacy webforms.

        Returns:
            Node ids in ascending order
        """
        pass

    @abstractmethod
    def get_form(self, nid: int) -> Optional[LegacyForm]:
        """
        Read a single legacy form.

        Args:
            nid: Legacy node id

        Returns:
            The form, or None when no webform exists for the node
        """
        pass

    @abstractmethod
    def get_components(self, nid: int) -> List[LegacyComponent]:
        """
        Read the components of a form, ordered by weight.

        Raises:
            ComponentError: If a component's extra settings are malformed
        """
        pass

    @abstractmethod
    def get_component_keys(self, nid: int) -> Dict[int, str]:
        """Map component ids of a form to their form keys, without decoding settings."""
        pass

    @abstractmethod
    def get_submissions(
        self,
        nid: int,
        after_sid: int = 0,
        limit: Optional[int] = None
    ) -> List[LegacySubmission]:
        """
        Read submissions (without values) with sid greater than after_sid.

        Args:
            nid: Legacy node id
            after_sid: Only return submissions above this id
            limit: Maximum number of submissions to return

        Returns:
            Submissions in sid order, with empty data
        """
        pass

    @abstractmethod
    def get_submitted_data(self, nid: int) -> Dict[int, Dict[str, Any]]:
        """
        Read all submitted values of a form.

        Returns:
            sid -> (form key -> value)
        """
        pass

    @abstractmethod
    def get_emails(self, nid: int) -> List[LegacyEmail]:
        """Read the email configuration rows of a form."""
        pass

    def add_warning(self, message: str) -> None:
        """Record a read warning."""
        self._warnings.append(message)
        logger.warning(f"Legacy read warning: {message}")

    @property
    def warnings(self) -> List[str]:
        return self._warnings.copy()

    def reset(self) -> None:
        """Forget collected warnings."""
        self._warnings = []
