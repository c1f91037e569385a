import itertools

import pytest

from nodezero.agent.errors import ConfigurationMissingError, RendezvousResolutionError
from nodezero.agent.rendezvous import (
    derive_rendezvous_ip,
    retrieve_rendezvous_ip,
    select_rendezvous_inputs,
)
from nodezero.asset.models import RENDEZVOUS_LABEL, AgentConfig, AgentManifests, NMStateConfig


def _host(name, *ips, rendezvous=False, ipv6=()):
    labels = {RENDEZVOUS_LABEL: "true"} if rendezvous else {}
    iface = {"name": "eth0", "type": "ethernet"}
    if ips:
        iface["ipv4"] = {"enabled": True, "address": [{"ip": ip, "prefix-length": 24} for ip in ips]}
    if ipv6:
        iface["ipv6"] = {"enabled": True, "address": [{"ip": ip, "prefix-length": 64} for ip in ipv6]}
    return NMStateConfig.model_validate(
        {
            "metadata": {"name": name, "labels": labels},
            "spec": {"config": {"interfaces": [iface]}},
        }
    )


def _manifests(*hosts):
    return AgentManifests(nmstate_configs=list(hosts))


# ----------------- presence matrix -----------------

@pytest.mark.parametrize(
    "has_config,has_manifests",
    list(itertools.product([True, False], repeat=2)),
)
def test_resolution_succeeds_iff_an_input_is_present(has_config, has_manifests):
    config = AgentConfig(rendezvousIP="10.0.0.5") if has_config else None
    manifests = _manifests(_host("master-0", "10.0.0.5")) if has_manifests else None

    if not (has_config or has_manifests):
        with pytest.raises(ConfigurationMissingError):
            retrieve_rendezvous_ip(config, manifests)
        return

    assert retrieve_rendezvous_ip(config, manifests) == "10.0.0.5"


def test_select_inputs_substitutes_empty_values():
    cfg, decls = select_rendezvous_inputs(None, _manifests(_host("a", "10.0.0.1")))
    assert cfg.rendezvous_ip is None
    assert [d.name for d in decls] == ["a"]

    pinned = AgentConfig(rendezvousIP="10.0.0.9")
    cfg, decls = select_rendezvous_inputs(pinned, None)
    assert cfg is pinned
    assert decls == []


def test_both_absent_reports_configuration_missing():
    with pytest.raises(ConfigurationMissingError, match="both AgentConfig and NMStateConfig are empty"):
        select_rendezvous_inputs(None, None)


# ----------------- derivation -----------------

def test_marked_host_wins_without_agent_config():
    manifests = _manifests(
        _host("master-1", "10.0.0.6"),
        _host("master-0", "10.0.0.5", rendezvous=True),
    )
    assert retrieve_rendezvous_ip(None, manifests) == "10.0.0.5"


def test_single_unmarked_host_uses_its_first_address():
    assert retrieve_rendezvous_ip(None, _manifests(_host("m", "192.168.1.10", "192.168.1.11"))) == "192.168.1.10"


def test_ipv6_used_when_no_ipv4():
    decl = _host("m", ipv6=("fd00::5",))
    assert derive_rendezvous_ip(AgentConfig(), [decl]) == "fd00::5"


def test_multiple_unmarked_hosts_are_ambiguous():
    manifests = _manifests(_host("a", "10.0.0.1"), _host("b", "10.0.0.2"))
    with pytest.raises(RendezvousResolutionError, match="cannot choose rendezvous host"):
        retrieve_rendezvous_ip(None, manifests)


def test_two_marked_hosts_with_different_addresses_fail():
    manifests = _manifests(
        _host("a", "10.0.0.1", rendezvous=True),
        _host("b", "10.0.0.2", rendezvous=True),
    )
    with pytest.raises(RendezvousResolutionError, match="multiple NMStateConfigs"):
        retrieve_rendezvous_ip(None, manifests)


def test_pinned_address_must_be_declared_when_hosts_exist():
    manifests = _manifests(_host("a", "10.0.0.1"), _host("b", "10.0.0.2"))
    assert retrieve_rendezvous_ip(AgentConfig(rendezvousIP="10.0.0.2"), manifests) == "10.0.0.2"

    with pytest.raises(RendezvousResolutionError, match="does not match"):
        retrieve_rendezvous_ip(AgentConfig(rendezvousIP="10.0.0.99"), manifests)


def test_pinned_address_conflicting_with_marked_host_fails():
    manifests = _manifests(_host("a", "10.0.0.1", rendezvous=True), _host("b", "10.0.0.2"))
    with pytest.raises(RendezvousResolutionError, match="conflicts"):
        retrieve_rendezvous_ip(AgentConfig(rendezvousIP="10.0.0.2"), manifests)


def test_invalid_pinned_address_is_rejected():
    with pytest.raises(RendezvousResolutionError, match="invalid rendezvousIP"):
        retrieve_rendezvous_ip(AgentConfig(rendezvousIP="not-an-ip"), None)


def test_host_without_addresses_fails():
    empty = NMStateConfig.model_validate({"metadata": {"name": "bare"}})
    with pytest.raises(RendezvousResolutionError, match="no IP address found in NMStateConfig bare"):
        retrieve_rendezvous_ip(None, _manifests(empty))


def test_empty_agent_config_and_no_hosts_is_missing_configuration():
    with pytest.raises(ConfigurationMissingError, match="missing rendezvousIP"):
        retrieve_rendezvous_ip(AgentConfig(), None)
