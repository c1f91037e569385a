# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/nodezero/agent/api.py

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Dict, List, Optional
from uuid import UUID

import requests

from nodezero.utils.context import Context

from .errors import RequestCancelledError


def _close_late_response(future: Future) -> None:
    # the caller already gave up on this request
    if future.cancelled() or future.exception() is not None:
        return
    close = getattr(future.result(), "close", None)
    if close is not None:
        close()


class AssistedInstallClient:
    """
    Minimal client for the assisted-install v2 REST API on node zero:
      - GET /infra-envs
      - GET /clusters
      - GET /events?infra_env_id=...

    Errors raised by requests (connection, timeout, HTTP status, bad JSON)
    are not wrapped, the caller sees them as-is.

    Requests run on a small worker pool so that a cancelled context
    returns control to the caller at once instead of after the HTTP timeout.
    """

    def __init__(
        self,
        *,
        base_url: str,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
        max_workers: int = 4,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="nodezero-rest")

    # -----------------------
    # HTTP helpers
    # -----------------------
    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _send(self, ctx: Context, path: str, params: Optional[Dict[str, str]]) -> Any:
        """
        Run session.get on the pool and wait until it finishes, the
        context is cancelled, or its deadline passes.
        """
        settled = threading.Event()
        future = self._executor.submit(
            self.session.get,
            self._url(path),
            params=params,
            timeout=ctx.bound_timeout(self.timeout),
        )
        future.add_done_callback(lambda _: settled.set())
        unregister = ctx.on_cancel(settled.set)
        try:
            settled.wait(ctx.remaining())
        finally:
            unregister()

        if not future.done():
            if not future.cancel():
                future.add_done_callback(_close_late_response)
            ctx.raise_if_done()
            raise RequestCancelledError(f"GET {path} aborted: context done")

        try:
            return future.result()
        except requests.RequestException as exc:
            if ctx.done():
                raise RequestCancelledError(f"GET {path} aborted: context done") from exc
            raise

    def _get(self, ctx: Context, path: str, params: Optional[Dict[str, str]] = None) -> Any:
        ctx.raise_if_done()
        r = self._send(ctx, path, params)
        ctx.raise_if_done()
        r.raise_for_status()
        return r.json()

    def _get_list(self, ctx: Context, path: str, params: Optional[Dict[str, str]] = None) -> List[Any]:
        payload = self._get(ctx, path, params=params)
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise ValueError(f"GET {path}: expected a JSON list, got {type(payload).__name__}")
        return payload

    # -----------------------
    # Installer
    # -----------------------
    def list_infra_envs(self, ctx: Context) -> List[Dict[str, Any]]:
        return self._get_list(ctx, "infra-envs")

    def list_clusters(self, ctx: Context) -> List[Dict[str, Any]]:
        return self._get_list(ctx, "clusters")

    # -----------------------
    # Events
    # -----------------------
    def list_events(self, ctx: Context, infra_env_id: UUID | str) -> List[Dict[str, Any]]:
        return self._get_list(ctx, "events", params={"infra_env_id": str(infra_env_id)})

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
        self.session.close()
