# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/nodezero/asset/models.py

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

RENDEZVOUS_LABEL = "agent-install.openshift.io/rendezvous"


class ObjectMeta(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = ""
    namespace: Optional[str] = None
    labels: Dict[str, str] = Field(default_factory=dict)


class AgentConfig(BaseModel):
    """agent-config.yaml; only the rendezvous pin matters here."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    api_version: str = Field("v1alpha1", alias="apiVersion")
    kind: str = "AgentConfig"
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    rendezvous_ip: Optional[str] = Field(None, alias="rendezvousIP")


class IPAddressEntry(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    ip: str
    prefix_length: Optional[int] = Field(None, alias="prefix-length")


class IPFamilyConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    enabled: Optional[bool] = None
    address: Optional[List[IPAddressEntry]] = None


class InterfaceConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    name: Optional[str] = None
    type: Optional[str] = None
    ipv4: Optional[IPFamilyConfig] = None
    ipv6: Optional[IPFamilyConfig] = None


class NetworkState(BaseModel):
    """nmstate document; only the interface addressing is typed."""

    model_config = ConfigDict(frozen=True, extra="allow")

    interfaces: Optional[List[InterfaceConfig]] = None


class NMStateConfigSpec(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    config: NetworkState = Field(default_factory=NetworkState)


class NMStateConfig(BaseModel):
    """
    Static network declaration for one host.

    Addresses are read from ``spec.config.interfaces[].ipv4/ipv6.address[].ip``.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    api_version: str = Field("agent-install.openshift.io/v1beta1", alias="apiVersion")
    kind: str = "NMStateConfig"
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: NMStateConfigSpec = Field(default_factory=NMStateConfigSpec)

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def is_rendezvous(self) -> bool:
        return self.metadata.labels.get(RENDEZVOUS_LABEL, "").lower() == "true"

    def _family_addresses(self, family: str) -> List[str]:
        out: List[str] = []
        for iface in self.spec.config.interfaces or []:
            block = getattr(iface, family)
            if block is None or block.enabled is False:
                continue
            out.extend(addr.ip for addr in block.address or [] if addr.ip)
        return out

    def addresses(self) -> List[str]:
        """All static addresses, IPv4 first, in interface order."""
        return self._family_addresses("ipv4") + self._family_addresses("ipv6")

    def first_ip(self) -> Optional[str]:
        addrs = self.addresses()
        return addrs[0] if addrs else None


class AgentManifests(BaseModel):
    model_config = ConfigDict(frozen=True)

    nmstate_configs: List[NMStateConfig] = Field(default_factory=list)


class InstallConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    api_version: str = Field("v1", alias="apiVersion")
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    base_domain: Optional[str] = Field(None, alias="baseDomain")
    ssh_key: str = Field("", alias="sshKey")
