# src/nodezero/cli/app.py
from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from importlib.metadata import PackageNotFoundError, version as pkg_version
from pathlib import Path
from typing import Optional

import requests
import typer

from nodezero.agent.errors import NodeZeroError, RequestCancelledError
from nodezero.agent.rest import NodeZeroRestClient
from nodezero.asset.errors import AssetError
from nodezero.config.settings import RestClientSettings
from nodezero.logging.log import init_logging, parse_level
from nodezero.utils.context import Context
from nodezero.utils.retry import NotReady, RetryError, retry

log = logging.getLogger("nodezero")


# ------------------------------------------------------------------------------
# CLI setup
# ------------------------------------------------------------------------------

app = typer.Typer(help="Query the rendezvous (node zero) REST API of an agent-based install")
wait_for = typer.Typer(help="Wait for install milestones on node zero")
app.add_typer(wait_for, name="wait-for")


@dataclass(frozen=True)
class CliState:
    asset_dir: Path
    settings: RestClientSettings
    run_id: str


@app.callback()
def main(
    ctx: typer.Context,
    asset_dir: Path = typer.Option(Path("."), "--dir", help="assets directory"),
    log_level: str = typer.Option("info", "--log-level", help='log level (e.g. "debug | info | warn | error")'),
):
    try:
        level = parse_level(log_level)
    except ValueError as exc:
        init_logging(level=logging.INFO)
        log.error("invalid log-level: %s", exc)
        raise typer.Exit(code=1)

    _, run_id, _ = init_logging(base_dir=asset_dir, level=level)
    ctx.obj = CliState(asset_dir=asset_dir, settings=RestClientSettings.from_env(), run_id=run_id)


# ------------------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------------------

def connect(state: CliState, call_ctx: Optional[Context] = None) -> NodeZeroRestClient:
    """
    Build the node zero client or exit with a logged error.
    """
    try:
        return NodeZeroRestClient.from_asset_dir(
            call_ctx or Context.background(),
            state.asset_dir,
            settings=state.settings,
        )
    except (NodeZeroError, AssetError) as exc:
        log.error("failed to create node zero REST client: %s", exc)
        if exc.__cause__ is not None:
            log.debug("caused by: %s", exc.__cause__)
        raise typer.Exit(code=1)


def _describe_lookup(fn) -> str:
    try:
        return fn().describe()
    except (requests.RequestException, ValueError, NodeZeroError) as exc:
        log.debug("lookup failed: %s", exc)
        return f"unavailable ({exc})"


def format_event(event: dict) -> str:
    return " ".join(
        str(event.get(key) or "-") for key in ("event_time", "severity", "message")
    )


# ------------------------------------------------------------------------------
# Commands
# ------------------------------------------------------------------------------

@app.command()
def status(ctx: typer.Context):
    """Show the rendezvous endpoint and what it currently knows."""
    state: CliState = ctx.obj
    client = connect(state)

    typer.echo(f"Rendezvous IP : {client.node_zero_ip}")
    typer.echo(f"REST API      : {client.rest_api_service_base_url.url}")

    if not client.is_rest_api_live():
        typer.echo("Live          : no")
        return

    typer.echo("Live          : yes")
    typer.echo(f"Cluster       : {_describe_lookup(client.get_cluster_id)}")
    typer.echo(f"InfraEnv      : {_describe_lookup(client.get_cluster_infra_env_id)}")


@app.command()
def events(
    ctx: typer.Context,
    infra_env_id: Optional[str] = typer.Option(
        None,
        "--infra-env-id",
        help="InfraEnv to read events for (default: the single registered one)",
    ),
):
    """Print install progress events for the cluster's infra-env."""
    state: CliState = ctx.obj
    client = connect(state)

    try:
        if infra_env_id is None:
            lookup = client.get_cluster_infra_env_id()
            if not lookup.resolved:
                log.error("cannot read events: infra-env is %s", lookup.describe())
                raise typer.Exit(code=1)
            infra_env_id = str(lookup.id)

        for event in client.get_infra_env_events(infra_env_id):
            typer.echo(format_event(event))
    except (requests.RequestException, ValueError, NodeZeroError) as exc:
        log.error("failed to read events from %s: %s", client.rest_api_service_base_url.url, exc)
        raise typer.Exit(code=1)


@wait_for.command("rest-api")
def wait_for_rest_api(
    ctx: typer.Context,
    timeout: int = typer.Option(1200, "--timeout", min=1, help="seconds to wait before giving up"),
):
    """Poll node zero until its REST API answers."""
    state: CliState = ctx.obj
    call_ctx = Context.with_timeout(timeout)
    client = connect(state, call_ctx)
    url = client.rest_api_service_base_url.url
    interval = state.settings.poll_interval_seconds

    log.info("Waiting up to %ds for the REST API at %s", timeout, url)

    def _on_retry(attempt: int, exc: Exception) -> None:
        log.debug("attempt %d: %s", attempt, exc)

    def _sleep(delay: float) -> None:
        # never sleep past the deadline
        time.sleep(min(delay, call_ctx.remaining() or 0.0))

    # the deadline ends polling; the attempt count only has to outlast it
    @retry(retries=math.ceil(timeout / interval) + 1, delay=interval, on_retry=_on_retry, sleep=_sleep)
    def _poll() -> None:
        if client.is_rest_api_live():
            return
        call_ctx.raise_if_done()
        raise NotReady(f"REST API at {url} is not live yet")

    try:
        _poll()
    except (RetryError, RequestCancelledError):
        log.error("REST API at %s did not come up within %ds", url, timeout)
        if client.node_ssh_keys:
            log.info(
                "check that node zero is reachable: ssh core@%s with the install-config sshKey",
                client.node_zero_ip,
            )
        raise typer.Exit(code=1)
    finally:
        client.close()

    log.info("REST API at %s is live", url)


@app.command("version")
def show_version():
    """Print the nodezero version."""
    try:
        v = pkg_version("nodezero")
    except PackageNotFoundError:
        v = "0.0.0+unknown"
    typer.echo(f"nodezero {v}")


if __name__ == "__main__":
    app()
