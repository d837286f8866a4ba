"""HTTP client for the target platform's webform REST endpoints."""

import base64
import time
import logging
from typing import Any, Dict, List, Optional

import requests

from .base import BaseTargetPlatform, SubmissionResult
from ..exceptions import TargetPlatformError
from ..models.target import EmailHandlerConfig, TargetSubmission

logger = logging.getLogger(__name__)


class WebformAPIClient(BaseTargetPlatform):
    """
    Target platform client for REST endpoints.

    Endpoint paths are templates filled with `webform_id` and `nid`; any of
    them can be overridden for sites that expose the resources elsewhere.
    """

    DEFAULT_ENDPOINTS = {
        "webforms": "/api/webform",
        "webform": "/api/webform/{webform_id}",
        "elements": "/api/webform/{webform_id}/elements",
        "handlers": "/api/webform/{webform_id}/handlers",
        "submissions": "/api/webform/{webform_id}/submissions",
        "node": "/api/node/{nid}",
    }

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        auth_type: str = "bearer",  # bearer, basic, header
        auth_header: str = "Authorization",
        dry_run: bool = False,
        rate_limit: float = 0.0,
        endpoints: Optional[Dict[str, str]] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0
    ):
        """
        Initialize the client.

        Args:
            base_url: Base URL of the target site
            api_key: API key for authentication
            auth_type: Type of authentication
            auth_header: Header name for 'header' authentication
            dry_run: If True, log writes instead of sending them
            rate_limit: Max requests per second (0 for no limit)
            endpoints: Overrides for DEFAULT_ENDPOINTS
            session: Custom requests session
            timeout: Request timeout in seconds
        """
        super().__init__(dry_run=dry_run)
        if not base_url:
            raise TargetPlatformError("No target URL configured")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.auth_type = auth_type
        self.auth_header = auth_header
        self.rate_limit = rate_limit
        self.timeout = timeout
        self.endpoints = {**self.DEFAULT_ENDPOINTS, **(endpoints or {})}
        self._last_request_time = 0.0
        self._session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        """Create a requests session with authentication."""
        session = requests.Session()

        if self.api_key:
            if self.auth_type == "bearer":
                session.headers["Authorization"] = f"Bearer {self.api_key}"
            elif self.auth_type == "basic":
                credentials = base64.b64encode(f"{self.api_key}:".encode()).decode()
                session.headers["Authorization"] = f"Basic {credentials}"
            elif self.auth_type == "header":
                session.headers[self.auth_header] = self.api_key

        session.headers["Content-Type"] = "application/json"
        session.headers["Accept"] = "application/json"

        return session

    def _rate_limit_wait(self):
        """Wait to respect rate limits."""
        if self.rate_limit > 0:
            elapsed = time.time() - self._last_request_time
            wait_time = (1.0 / self.rate_limit) - elapsed
            if wait_time > 0:
                time.sleep(wait_time)
        self._last_request_time = time.time()

    def _url(self, endpoint: str, **params: Any) -> str:
        return f"{self.base_url}{self.endpoints[endpoint].format(**params)}"

    def _request(
        self,
        method: str,
        url: str,
        allow_missing: bool = False,
        **kwargs: Any
    ) -> Optional[Any]:
        """
        Send a request and decode the JSON response.

        Returns None for a 404 when allow_missing is set.

        Raises:
            TargetPlatformError: On any other HTTP or transport failure, or a
                response body that is not JSON
        """
        self._rate_limit_wait()

        try:
            response = self._session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            raise TargetPlatformError(f"{method} {url} failed: {e}") from e

        if allow_missing and response.status_code == 404:
            return None

        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            message = str(e)
            try:
                error_data = e.response.json()
                message = error_data.get("message") or error_data.get("error") or message
            except ValueError:
                pass
            raise TargetPlatformError(message, status_code=response.status_code) from e

        if not response.text:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise TargetPlatformError(
                f"{method} {url} returned a non-JSON response: {e}",
                status_code=response.status_code,
            ) from e

    def _simulate(self, message: str) -> None:
        logger.info(f"SIMULATE: {message}")

    def get_webform(self, webform_id: str) -> Optional[Dict[str, Any]]:
        """Load a webform, or None when it does not exist."""
        return self._request("GET", self._url("webform", webform_id=webform_id), allow_missing=True)

    def save_webform(self, webform_id: str, values: Dict[str, Any], create: bool = False) -> Dict[str, Any]:
        """Create or update a webform."""
        if self.dry_run:
            self._simulate(f"{'Create' if create else 'Update'} webform {webform_id}")
            return {"id": webform_id, **values}

        if create:
            return self._request("POST", self._url("webforms"), json=values)
        return self._request("PATCH", self._url("webform", webform_id=webform_id), json=values)

    def set_elements(self, webform_id: str, elements: Dict[str, Dict[str, Any]]) -> None:
        """Replace the elements of a webform."""
        if self.dry_run:
            self._simulate(f"Set {len(elements)} elements on webform {webform_id}")
            return
        self._request("PUT", self._url("elements", webform_id=webform_id), json={"elements": elements})

    def create_submission(self, submission: TargetSubmission) -> SubmissionResult:
        """Create a single submission."""
        if self.dry_run:
            self._simulate(f"Create submission {submission.sid} on webform {submission.webform_id}")
            return SubmissionResult(sid=submission.sid, target_id=str(submission.sid))

        response_data = self._request(
            "POST",
            self._url("submissions", webform_id=submission.webform_id),
            json=submission.to_dict(),
        )
        target_id = response_data.get("sid") or response_data.get("id") or submission.sid

        return SubmissionResult(sid=submission.sid, target_id=str(target_id))

    def get_node(self, nid: int) -> Optional[Dict[str, Any]]:
        """Load a content node, or None when it does not exist."""
        return self._request("GET", self._url("node", nid=nid), allow_missing=True)

    def link_node(self, nid: int, webform_id: str) -> None:
        """Point a node's webform field at a webform."""
        if self.dry_run:
            self._simulate(f"Link node {nid} to webform {webform_id}")
            return
        self._request(
            "PATCH",
            self._url("node", nid=nid),
            json={"webform": {"target_id": webform_id}},
        )

    def add_handler(self, webform_id: str, handler: EmailHandlerConfig) -> None:
        """Attach a handler to a webform."""
        if self.dry_run:
            self._simulate(f"Add handler {handler.handler_id} to webform {webform_id}")
            return
        self._request("POST", self._url("handlers", webform_id=webform_id), json=handler.to_dict())

    def list_submission_ids(self, webform_id: str) -> List[int]:
        """List the ids of all submissions of a webform."""
        data = self._request(
            "GET",
            self._url("submissions", webform_id=webform_id),
            params={"fields": "sid"},
            allow_missing=True,
        )
        if not data:
            return []
        items = data.get("data", []) if isinstance(data, dict) else data
        return [int(item["sid"] if isinstance(item, dict) else item) for item in items]

    def delete_submissions(self, webform_id: str, sids: List[int]) -> int:
        """Delete submissions of a webform."""
        if self.dry_run:
            self._simulate(f"Delete {len(sids)} submissions of webform {webform_id}")
            return 0
        data = self._request(
            "DELETE",
            self._url("submissions", webform_id=webform_id),
            json={"sids": list(sids)},
        )
        return int(data.get("deleted", len(sids)))

    def validate_connection(self) -> bool:
        """Validate connection to the target site."""
        try:
            self._rate_limit_wait()
            response = self._session.get(self.base_url, timeout=self.timeout)
            return response.status_code < 500
        except requests.exceptions.RequestException as e:
            logger.error(f"Target connection validation failed: {e}")
            return False
