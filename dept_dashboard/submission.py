"""
IT asset request submission.

The only write path in the dashboard: a signed request is validated
locally, then POSTed as JSON to the submission endpoint, which appends it
to the asset request sheet and answers {success, requestId | message}.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass

import requests

from .config import SUBMIT_URL

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "department", "asset", "reason", "signature")


@dataclass(frozen=True)
class AssetRequest:
    name: str
    department: str
    asset: str
    reason: str
    signature: str  # data:image/png;base64,... from the signature pad
    email: str = ""

    def missing_fields(self) -> list[str]:
        """Names of required fields that are blank or malformed."""
        missing = [name for name in REQUIRED_FIELDS if not str(getattr(self, name) or "").strip()]
        if "signature" not in missing and not self.signature.startswith("data:"):
            missing.append("signature")
        return missing


@dataclass(frozen=True)
class SubmissionResult:
    success: bool
    request_id: str | None = None
    message: str = ""


def submit_asset_request(
    request: AssetRequest,
    url: str = SUBMIT_URL,
    session: requests.Session | None = None,
    timeout: float | None = None,
) -> SubmissionResult:
    """Validate and submit an asset request.

    Never raises for transport or response problems; those come back as
    ``SubmissionResult(success=False, message=...)``. Invalid requests are
    rejected before any network call.
    """
    missing = request.missing_fields()
    if missing:
        return SubmissionResult(
            success=False,
            message=f"All fields including signature are required (missing: {', '.join(missing)})",
        )

    http = session or requests.Session()
    try:
        response = http.post(url, json=asdict(request), timeout=timeout)
    except requests.RequestException as exc:
        logger.error("Asset request submission failed url=%s error=%s", url, exc)
        return SubmissionResult(success=False, message="An error occurred. Please try again.")
    finally:
        if session is None:
            http.close()

    try:
        body = response.json()
    except ValueError:
        logger.error("Asset request endpoint returned non-JSON status=%s", response.status_code)
        return SubmissionResult(success=False, message="Failed to submit request")

    if not isinstance(body, dict) or not body.get("success"):
        message = body.get("message") if isinstance(body, dict) else None
        logger.warning("Asset request rejected: %s", message)
        return SubmissionResult(success=False, message=message or "Failed to submit request")

    request_id = body.get("requestId")
    logger.info("Asset request submitted request_id=%s", request_id)
    return SubmissionResult(
        success=True,
        request_id=request_id,
        message=body.get("message", "IT Asset Request submitted successfully"),
    )
