# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/nodezero/agent/endpoint.py
from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from typing import Optional

import requests

from nodezero.config.settings import RestClientSettings

from .api import AssistedInstallClient
from .errors import RendezvousResolutionError


@dataclass(frozen=True)
class ServiceEndpoint:
    host: str
    port: int
    base_path: str
    scheme: str = "http"

    @property
    def netloc(self) -> str:
        # IPv6 literals must be bracketed, as net.JoinHostPort does
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"

    @property
    def url(self) -> str:
        return f"{self.scheme}://{self.netloc}{self.base_path}"

    def __str__(self) -> str:
        return self.url


def build_endpoint(address: str, settings: Optional[RestClientSettings] = None) -> ServiceEndpoint:
    settings = settings or RestClientSettings()
    try:
        host = str(ipaddress.ip_address(address))
    except ValueError as exc:
        raise RendezvousResolutionError(f"malformed rendezvous address {address!r}") from exc

    base_path = "/" + settings.base_path.strip("/")
    return ServiceEndpoint(host=host, port=settings.port, base_path=base_path)


def build_client(
    endpoint: ServiceEndpoint,
    settings: Optional[RestClientSettings] = None,
    *,
    session: Optional[requests.Session] = None,
) -> AssistedInstallClient:
    """
    Bind an API client to the endpoint. No request is sent here.
    """
    settings = settings or RestClientSettings()
    return AssistedInstallClient(
        base_url=endpoint.url,
        timeout=settings.timeout_seconds,
        session=session,
    )
