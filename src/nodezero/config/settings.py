# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/nodezero/config/settings.py

import logging
import os

from pydantic import BaseModel, ConfigDict, Field, ValidationError

log = logging.getLogger("nodezero")

# Assisted service on node zero
DEFAULT_PORT = 8090
DEFAULT_BASE_PATH = "/api/assisted-install/v2"


class RestClientSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    port: int = DEFAULT_PORT
    base_path: str = DEFAULT_BASE_PATH
    timeout_seconds: float = Field(30.0, gt=0)
    poll_interval_seconds: int = Field(5, ge=1)

    @classmethod
    def from_env(cls) -> "RestClientSettings":
        """
        Build settings, honouring environment overrides:

        - ``NODEZERO_REST_TIMEOUT``: per-request HTTP timeout in seconds
        - ``NODEZERO_POLL_INTERVAL``: seconds between liveness polls

        Invalid overrides are logged and ignored.
        """
        overrides = {}
        for env, key in (
            ("NODEZERO_REST_TIMEOUT", "timeout_seconds"),
            ("NODEZERO_POLL_INTERVAL", "poll_interval_seconds"),
        ):
            value = os.environ.get(env)
            if value:
                overrides[key] = value

        try:
            return cls.model_validate(overrides)
        except ValidationError as exc:
            log.warning("ignoring invalid REST client overrides: %s", exc)
            return cls()
