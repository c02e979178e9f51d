from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence
from urllib.parse import quote

import requests

from dorexport.core.logger import setup_logger
from dorexport.export.errors import ErrorKind, ExportError

logger = setup_logger(__name__)


@dataclass(frozen=True)
class NotificationResult:
    status_code: int
    reason: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def describe(self) -> str:
        return f"{self.reason} ({self.status_code})"


def build_trigger_url(
    api_base_url: str,
    identifier: str,
    workflow_name: str,
    prefix: Sequence[str] = (),
) -> str:
    """``{base}/{identifier}/[prefix/...]{workflow}`` with each segment path-quoted."""
    segments = [identifier, *prefix, workflow_name]
    path = "/".join(quote(segment, safe=":@") for segment in segments)
    return f"{api_base_url.rstrip('/')}/{path}"


def trigger_workflow(
    url: str,
    username: str = "",
    password: str = "",
    timeout: float = 30,
) -> NotificationResult:
    """POST to the workflow endpoint with an empty body.

    Any HTTP status is returned to the caller; only transport failures raise.

    Raises:
        ExportError: NOTIFICATION_FAILED when the API cannot be reached.
    """
    auth: Optional[tuple] = (username, password) if username and password else None
    logger.debug("Sending POST request to %s (auth=%s)", url, "basic" if auth else "none")

    try:
        response = requests.post(url, auth=auth, timeout=timeout)
    except requests.exceptions.ConnectionError as e:
        raise ExportError(f"Could not connect to workflow API at {url}", ErrorKind.NOTIFICATION_FAILED) from e
    except requests.exceptions.Timeout as e:
        raise ExportError(
            f"Workflow API timed out after {timeout}s: {url}", ErrorKind.NOTIFICATION_FAILED
        ) from e
    except requests.exceptions.RequestException as e:
        raise ExportError(f"Workflow API call failed: {e}", ErrorKind.NOTIFICATION_FAILED) from e

    result = NotificationResult(status_code=response.status_code, reason=response.reason or "")
    logger.debug("Workflow API responded %s", result.describe())
    return result
