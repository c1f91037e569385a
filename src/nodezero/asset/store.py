# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/nodezero/asset/store.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from .assets import AgentConfigAsset, AgentManifestsAsset, Asset, InstallConfigAsset
from .errors import AssetLoadError, AssetStoreError
from .models import AgentConfig, AgentManifests, InstallConfig

log = logging.getLogger("nodezero")


class AssetStore:
    """
    Loads typed assets from an install directory.

    A missing file means the asset is unavailable and yields ``None``.
    A file that exists but cannot be parsed raises ``AssetLoadError``.
    """

    def __init__(self, asset_dir: str | Path):
        self.asset_dir = Path(asset_dir)
        if not self.asset_dir.is_dir():
            raise AssetStoreError(f"failed to create asset store: {self.asset_dir} is not a directory")
        self._cache: Dict[str, Any] = {}

    def path_for(self, asset: Asset) -> Path:
        return self.asset_dir / asset.filename

    def load(self, asset: Asset) -> Optional[Any]:
        if asset.name in self._cache:
            return self._cache[asset.name]

        path = self.path_for(asset)
        if not path.is_file():
            log.debug("%s not found at %s", asset.name, path)
            return None

        try:
            obj = asset.parse(path)
        except (OSError, yaml.YAMLError, ValidationError, ValueError) as exc:
            raise AssetLoadError(f"failed to load {asset.name} from {path}: {exc}") from exc

        self._cache[asset.name] = obj
        return obj


@dataclass(frozen=True)
class BootstrapAssets:
    agent_config: Optional[AgentConfig]
    agent_manifests: Optional[AgentManifests]
    install_config: Optional[InstallConfig]


def load_bootstrap_assets(store: AssetStore, *, logger: logging.Logger = log) -> BootstrapAssets:
    """
    Load AgentConfig, NMStateConfig manifests and InstallConfig.

    Every asset is attempted even if an earlier one failed; failures are
    logged at debug level and then reported together.
    """
    loaded: Dict[str, Any] = {}
    first_error: Optional[AssetLoadError] = None

    for key, asset in (
        ("agent_config", AgentConfigAsset()),
        ("agent_manifests", AgentManifestsAsset()),
        ("install_config", InstallConfigAsset()),
    ):
        try:
            loaded[key] = store.load(asset)
        except AssetLoadError as exc:
            logger.debug("failed to load %s: %s", asset.name, exc.__cause__ or exc)
            loaded[key] = None
            first_error = first_error or exc

    if first_error is not None:
        raise AssetLoadError("failed to load AgentConfig, NMStateConfig, or InstallConfig") from first_error

    return BootstrapAssets(**loaded)
