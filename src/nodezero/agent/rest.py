# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/nodezero/agent/rest.py

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional
from uuid import UUID

import requests

from nodezero.asset.store import AssetStore, load_bootstrap_assets
from nodezero.config.settings import RestClientSettings
from nodezero.utils.context import Context

from .api import AssistedInstallClient
from .endpoint import ServiceEndpoint, build_client, build_endpoint
from .errors import NodeZeroError
from .lookup import IdentityLookup, classify_listing, log_lookup
from .rendezvous import retrieve_rendezvous_ip

log = logging.getLogger("nodezero")


class NodeZeroRestClient:
    """
    Talks to the assisted-install REST API running on node zero.

    Everything captured at construction is read-only afterwards, so one
    instance can be shared between threads and reused after failed calls.
    """

    def __init__(
        self,
        *,
        ctx: Context,
        api: AssistedInstallClient,
        endpoint: ServiceEndpoint,
        node_zero_ip: str,
        node_ssh_keys: Optional[List[str]] = None,
        logger: logging.Logger = log,
    ):
        self.ctx = ctx
        self.api = api
        self.endpoint = endpoint
        self.node_zero_ip = node_zero_ip
        self.node_ssh_keys = tuple(node_ssh_keys or ())
        self.logger = logger
        self._unregister_close = ctx.on_cancel(api.close)

    @classmethod
    def from_asset_dir(
        cls,
        ctx: Context,
        asset_dir: str | Path,
        *,
        settings: Optional[RestClientSettings] = None,
        session: Optional[requests.Session] = None,
    ) -> "NodeZeroRestClient":
        """
        Load assets, resolve the rendezvous IP and bind a client to it.
        """
        settings = settings or RestClientSettings.from_env()

        store = AssetStore(asset_dir)
        assets = load_bootstrap_assets(store)

        rendezvous_ip = retrieve_rendezvous_ip(assets.agent_config, assets.agent_manifests)

        # SSH keys help tell REST API failures apart from network reachability issues
        ssh_keys: List[str] = []
        if assets.install_config is not None and assets.install_config.ssh_key:
            ssh_keys.append(assets.install_config.ssh_key)

        try:
            endpoint = build_endpoint(rendezvous_ip, settings)
        except NodeZeroError as exc:
            raise NodeZeroError(f"failed to build REST endpoint for {rendezvous_ip}") from exc

        return cls(
            ctx=ctx,
            api=build_client(endpoint, settings, session=session),
            endpoint=endpoint,
            node_zero_ip=rendezvous_ip,
            node_ssh_keys=ssh_keys,
        )

    # -----------------------
    # Liveness
    # -----------------------
    def is_rest_api_live(self) -> bool:
        """
        True once GET /infra-envs succeeds. Any failure reads as "not yet".
        """
        try:
            self.api.list_infra_envs(self.ctx)
        except (requests.RequestException, ValueError, NodeZeroError) as exc:
            self.logger.debug("rest API at %s not live: %s", self.endpoint.url, exc)
            return False
        return True

    def close(self) -> None:
        """Release the HTTP session; the context no longer needs to do it."""
        self._unregister_close()
        self.api.close()

    @property
    def rest_api_service_base_url(self) -> ServiceEndpoint:
        return self.endpoint

    # -----------------------
    # Events
    # -----------------------
    def get_infra_env_events(self, infra_env_id: UUID | str) -> List[Dict[str, Any]]:
        return self.api.list_events(self.ctx, infra_env_id)

    # -----------------------
    # Identity lookups
    # -----------------------
    def get_cluster_id(self) -> IdentityLookup:
        lookup = classify_listing(self.api.list_clusters(self.ctx))
        log_lookup("clusters", lookup, self.logger)
        return lookup

    def get_cluster_infra_env_id(self) -> IdentityLookup:
        lookup = classify_listing(self.api.list_infra_envs(self.ctx))
        log_lookup("infraenvs", lookup, self.logger)
        return lookup
