# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/nodezero/agent/lookup.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Sequence
from uuid import UUID

log = logging.getLogger("nodezero")


class LookupStatus(str, Enum):
    RESOLVED = "resolved"
    NOT_REGISTERED = "not-registered"
    AMBIGUOUS = "ambiguous"


@dataclass(frozen=True)
class IdentityLookup:
    """
    Outcome of looking up the single cluster / infra-env on node zero.

    Only RESOLVED carries an id. NOT_REGISTERED and AMBIGUOUS are both
    "try again later" states, not failures.
    """

    status: LookupStatus
    count: int
    id: Optional[UUID] = None

    @property
    def resolved(self) -> bool:
        return self.status is LookupStatus.RESOLVED

    def describe(self) -> str:
        if self.resolved:
            return str(self.id)
        if self.status is LookupStatus.AMBIGUOUS:
            return f"ambiguous ({self.count})"
        return "not registered"


def classify_listing(items: Sequence[Mapping[str, Any]]) -> IdentityLookup:
    """
    Pure one/zero/many decision over a listing payload.

    Raises ValueError if the single item has no valid UUID id.
    """
    count = len(items)
    if count == 1:
        try:
            ident = UUID(str(items[0]["id"]))
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"listing item has no valid id: {items[0]!r}") from exc
        return IdentityLookup(LookupStatus.RESOLVED, count, ident)
    if count == 0:
        return IdentityLookup(LookupStatus.NOT_REGISTERED, count)
    return IdentityLookup(LookupStatus.AMBIGUOUS, count)


def log_lookup(kind: str, lookup: IdentityLookup, logger: logging.Logger = log) -> None:
    """
    Emit the diagnostic for an unresolved lookup. ``kind`` is the plural
    resource noun ("clusters", "infraenvs").
    """
    singular = kind[:-1] if kind.endswith("s") else kind
    if lookup.status is LookupStatus.NOT_REGISTERED:
        logger.debug("%s is not registered in rest API", singular)
    elif lookup.status is LookupStatus.AMBIGUOUS:
        logger.info("found too many %s. number of %s found: %d", kind, kind, lookup.count)
