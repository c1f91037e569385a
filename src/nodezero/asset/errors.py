# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/nodezero/asset/errors.py
class AssetError(RuntimeError):
    """Base class for asset store failures."""

class AssetStoreError(AssetError):
    """Raised when the asset directory cannot back a store."""

class AssetLoadError(AssetError):
    """Raised when an asset exists on disk but cannot be parsed or validated."""
