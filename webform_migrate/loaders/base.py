"""Base interface for the target webform platform."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple
import logging

from ..models.target import EmailHandlerConfig, TargetSubmission

logger = logging.getLogger(__name__)


@dataclass
class SubmissionResult:
    """Result of creating one submission on the target."""
    sid: int
    target_id: Optional[str] = None


class BaseTargetPlatform(ABC):
    """
    Base class for target platform clients.

    The target platform owns all storage; clients only call its write APIs
    for webforms, elements, submissions, nodes and handlers.
    """

    def __init__(self, dry_run: bool = False):
        """
        Initialize the client.

        Args:
            dry_run: If True, log writes instead of performing them
        """
        self.dry_run = dry_run

    @abstractmethod
    def get_webform(self, webform_id: str) -> Optional[Dict[str, Any]]:
        """Load a webform, or None when it does not exist."""
        pass

    @abstractmethod
    def save_webform(self, webform_id: str, values: Dict[str, Any], create: bool = False) -> Dict[str, Any]:
        """
        Create or update a webform.

        Args:
            webform_id: Machine name of the webform
            values: Properties to set ('title', 'settings', ...)
            create: True to create a new webform, False to update

        Returns:
            The saved webform
        """
        pass

    @abstractmethod
    def set_elements(self, webform_id: str, elements: Dict[str, Dict[str, Any]]) -> None:
        """Replace the elements of a webform."""
        pass

    @abstractmethod
    def create_submission(self, submission: TargetSubmission) -> SubmissionResult:
        """
        Create a single submission.

        Raises:
            TargetPlatformError: If the target rejects the submission
        """
        pass

    @abstractmethod
    def get_node(self, nid: int) -> Optional[Dict[str, Any]]:
        """Load a content node, or None when it does not exist."""
        pass

    @abstractmethod
    def link_node(self, nid: int, webform_id: str) -> None:
        """Point a node's webform field at a webform."""
        pass

    @abstractmethod
    def add_handler(self, webform_id: str, handler: EmailHandlerConfig) -> None:
        """Attach a handler to a webform."""
        pass

    @abstractmethod
    def list_submission_ids(self, webform_id: str) -> List[int]:
        """List the ids of all submissions of a webform."""
        pass

    @abstractmethod
    def delete_submissions(self, webform_id: str, sids: List[int]) -> int:
        """
        Delete submissions of a webform.

        Returns:
            Number of submissions deleted
        """
        pass

    def ensure_webform(
        self,
        webform_id: str,
        title: str,
        new_only: bool = False
    ) -> Tuple[Dict[str, Any], bool]:
        """
        Create the webform, or update it when it already exists.

        Args:
            webform_id: Machine name of the webform
            title: Webform title
            new_only: Leave existing webforms untouched

        Returns:
            (webform, continue) where continue is False when an existing
            webform was left alone and its components should not be imported
        """
        existing = self.get_webform(webform_id)

        if existing is not None:
            if new_only:
                logger.info(f"Webform {webform_id} already exists, leaving it alone (new forms only)")
                return existing, False
            logger.info(f"Updating existing webform {webform_id}")
            return self.save_webform(webform_id, {"title": title}, create=False), True

        logger.info(f"Creating webform {webform_id}")
        return self.save_webform(webform_id, {"id": webform_id, "title": title}, create=True), True

    def validate_connection(self) -> bool:
        """Validate the connection to the target platform."""
        return True
