"""HTTP client for the animal identity service."""

from __future__ import annotations

import logging
import mimetypes
from pathlib import PurePosixPath
from typing import Any, Optional
from urllib.parse import urlsplit

import requests

from petid.core.config import ServiceConfig
from petid.core.errors import (
    Err,
    Ok,
    Outcome,
    client_error,
    image_unavailable,
    invalid_response,
    network_error,
    server_error,
)
from petid.core.models import WorkflowKind
from petid.validation.validator import UNKNOWN_MEDIA_TYPE, ImageFile, SelectedImage

logger = logging.getLogger(__name__)


def _error_detail(response: requests.Response) -> Optional[str]:
    """The `error` field of a failure body, if the body is JSON and has one."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        detail = body.get("error")
        if detail:
            return str(detail)
    return None


class IdentityServiceClient:
    """
    Posts one image per call to /register or /search.

    Every failure comes back as an `Err` value; nothing raised by `requests`
    escapes `post_image`.
    """

    def __init__(self, config: Optional[ServiceConfig] = None, http: Optional[requests.Session] = None) -> None:
        self.config = config or ServiceConfig()
        self._http = http or requests.Session()

    def post_image(self, kind: WorkflowKind, image: SelectedImage) -> Outcome:
        url = self.config.url_for(kind)
        files = {self.config.image_field: (image.name, image.data, image.media_type)}

        logger.debug("POST %s (%s, %d bytes)", url, image.media_type, len(image.data))
        try:
            response = self._http.post(url, files=files, timeout=self.config.timeout)
        except (requests.ConnectionError, requests.Timeout) as e:
            logger.warning("no response from %s: %s", url, e)
            return Err(network_error())
        except requests.RequestException as e:
            logger.warning("request to %s failed: %s", url, e)
            return Err(client_error(e))

        if not 200 <= response.status_code < 300:
            detail = _error_detail(response)
            logger.warning("%s returned HTTP %d: %s", url, response.status_code, detail)
            return Err(server_error(kind, detail))

        try:
            body: Any = response.json()
        except ValueError:
            return Err(invalid_response(kind, "response is not JSON"))
        return Ok(body)

    def fetch_image(self, url: str) -> Outcome:
        """Download a match's registered image for display. Returns `Ok(ImageFile)`."""
        try:
            response = self._http.get(url, timeout=self.config.timeout)
        except (requests.ConnectionError, requests.Timeout) as e:
            logger.info("no response fetching %s: %s", url, e)
            return Err(network_error())
        except requests.RequestException as e:
            logger.info("fetching %s failed: %s", url, e)
            return Err(client_error(e))

        if not 200 <= response.status_code < 300:
            return Err(image_unavailable(response.status_code))

        name = PurePosixPath(urlsplit(url).path).name or "image"
        media_type = response.headers.get("Content-Type", "").split(";", 1)[0].strip()
        if not media_type.startswith("image/"):
            media_type = mimetypes.guess_type(name)[0] or UNKNOWN_MEDIA_TYPE
        return Ok(ImageFile(name=name, data=response.content, media_type=media_type))

    def close(self) -> None:
        self._http.close()
