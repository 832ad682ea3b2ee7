from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from petid.core.models import WorkflowKind

DEFAULT_SERVICE_URL = "https://backend4-vwa3.onrender.com"

ENV_SERVICE_URL = "PETID_SERVICE_URL"
ENV_TIMEOUT = "PETID_TIMEOUT"


@dataclass(frozen=True)
class ServiceConfig:
    """
    Where and how the identity service is reached.

    base_url:
        Scheme + host (+ optional path prefix) of the service. Trailing slashes are ignored.
    timeout:
        Seconds to wait for connect/read before the request counts as a network failure.
    image_field:
        Multipart part name carrying the image bytes.
    """
    base_url: str = DEFAULT_SERVICE_URL
    timeout: float = 30.0
    image_field: str = "image"

    def url_for(self, kind: WorkflowKind) -> str:
        return self.base_url.rstrip("/") + kind.endpoint

    @staticmethod
    def from_env(environ: Optional[Mapping[str, str]] = None) -> "ServiceConfig":
        env = os.environ if environ is None else environ
        config = ServiceConfig()

        url = env.get(ENV_SERVICE_URL, "").strip()
        if url:
            config = replace(config, base_url=url)

        raw_timeout = env.get(ENV_TIMEOUT, "").strip()
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError:
                raise ValueError(f"{ENV_TIMEOUT} must be a number of seconds, got {raw_timeout!r}") from None
            if timeout <= 0:
                raise ValueError(f"{ENV_TIMEOUT} must be positive, got {timeout}")
            config = replace(config, timeout=timeout)

        return config
