# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/nodezero/agent/errors.py
class NodeZeroError(RuntimeError):
    """Base class for rendezvous client failures."""

class ConfigurationMissingError(NodeZeroError):
    """Raised when neither AgentConfig nor NMStateConfig is available."""

class RendezvousResolutionError(NodeZeroError):
    """Raised when the rendezvous IP cannot be derived unambiguously."""

class RequestCancelledError(NodeZeroError):
    """Raised when a call is attempted on a cancelled or expired context."""
