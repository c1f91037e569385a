# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/nodezero/agent/rendezvous.py
from __future__ import annotations

import ipaddress
import logging
from typing import List, Optional, Sequence, Tuple

from nodezero.asset.models import AgentConfig, AgentManifests, NMStateConfig

from .errors import ConfigurationMissingError, RendezvousResolutionError

log = logging.getLogger("nodezero")


def _normalize_ip(value: str, *, source: str) -> str:
    try:
        return str(ipaddress.ip_address(value.strip()))
    except ValueError as exc:
        raise RendezvousResolutionError(f"invalid rendezvousIP {value!r} in {source}") from exc


def select_rendezvous_inputs(
    agent_config: Optional[AgentConfig],
    agent_manifests: Optional[AgentManifests],
) -> Tuple[AgentConfig, List[NMStateConfig]]:
    """
    Decide which inputs feed the resolver.

        agent config | manifests | used
        -------------+-----------+-------------------------------
        present      | present   | both
        absent       | present   | empty AgentConfig + manifests
        present      | absent    | agent config + no declarations
        absent       | absent    | ConfigurationMissingError
    """
    has_config = agent_config is not None
    has_manifests = agent_manifests is not None

    if has_config and has_manifests:
        return agent_config, list(agent_manifests.nmstate_configs)
    if has_manifests:
        return AgentConfig(), list(agent_manifests.nmstate_configs)
    if has_config:
        return agent_config, []
    raise ConfigurationMissingError("both AgentConfig and NMStateConfig are empty")


def _first_ip(cfg: NMStateConfig) -> str:
    ip = cfg.first_ip()
    if ip is None:
        raise RendezvousResolutionError(f"no IP address found in NMStateConfig {cfg.name or '<unnamed>'}")
    return _normalize_ip(ip, source=f"NMStateConfig {cfg.name}")


def derive_rendezvous_ip(config: AgentConfig, declarations: Sequence[NMStateConfig]) -> str:
    """
    Pure resolution: exactly one address or an error, never a guess.
    """
    marked = [d for d in declarations if d.is_rendezvous]

    if config.rendezvous_ip:
        pinned = _normalize_ip(config.rendezvous_ip, source="AgentConfig")

        for d in marked:
            if _first_ip(d) != pinned:
                raise RendezvousResolutionError(
                    f"rendezvousIP {pinned} conflicts with NMStateConfig {d.name} marked as rendezvous host"
                )
        if declarations:
            pool = {
                _normalize_ip(ip, source=f"NMStateConfig {d.name}")
                for d in declarations
                for ip in d.addresses()
            }
            if pinned not in pool:
                raise RendezvousResolutionError(
                    f"rendezvousIP {pinned} does not match any address declared in NMStateConfig"
                )
        return pinned

    if marked:
        candidates = sorted({_first_ip(d) for d in marked})
        if len(candidates) > 1:
            raise RendezvousResolutionError(
                f"multiple NMStateConfigs marked as rendezvous host: {', '.join(candidates)}"
            )
        return candidates[0]

    if len(declarations) == 1:
        return _first_ip(declarations[0])
    if len(declarations) > 1:
        names = ", ".join(sorted(d.name or "<unnamed>" for d in declarations))
        raise RendezvousResolutionError(
            f"cannot choose rendezvous host among NMStateConfigs ({names}); set rendezvousIP in agent-config"
        )

    raise ConfigurationMissingError("missing rendezvousIP in agent-config or at least one NMStateConfig manifest")


def retrieve_rendezvous_ip(
    agent_config: Optional[AgentConfig],
    agent_manifests: Optional[AgentManifests],
) -> str:
    config, declarations = select_rendezvous_inputs(agent_config, agent_manifests)
    ip = derive_rendezvous_ip(config, declarations)
    log.debug("rendezvous IP resolved to %s", ip)
    return ip
