# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/nodezero/asset/assets.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, List, Protocol

import yaml

from .models import AgentConfig, AgentManifests, InstallConfig, NMStateConfig


class Asset(Protocol):
    name: str
    filename: str

    def parse(self, path: Path) -> Any: ...


def _read_expanded(path: Path) -> str:
    """Read a YAML file, expanding ${ENV_VAR} references."""
    return os.path.expandvars(path.read_text())


def _load_yaml(path: Path) -> dict:
    data = yaml.safe_load(_read_expanded(path)) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path.name}: expected a mapping, got {type(data).__name__}")
    return data


class AgentConfigAsset:
    name = "Agent Config"
    filename = "agent-config.yaml"

    def parse(self, path: Path) -> AgentConfig:
        return AgentConfig.model_validate(_load_yaml(path))


class AgentManifestsAsset:
    """
    NMStateConfig manifests, one YAML document per host.
    """

    name = "Agent Manifests"
    filename = "cluster-manifests/nmstateconfig.yaml"

    def parse(self, path: Path) -> AgentManifests:
        configs: List[NMStateConfig] = []
        for doc in yaml.safe_load_all(_read_expanded(path)):
            if not doc:
                continue
            if not isinstance(doc, dict):
                raise ValueError(f"{path.name}: expected a mapping per document")
            configs.append(NMStateConfig.model_validate(doc))
        return AgentManifests(nmstate_configs=configs)


class InstallConfigAsset:
    name = "Install Config"
    filename = "install-config.yaml"

    def parse(self, path: Path) -> InstallConfig:
        return InstallConfig.model_validate(_load_yaml(path))
