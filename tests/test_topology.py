from unittest.mock import MagicMock

import pytest
import requests

from routing_flow.core.errors import TopologyFetchError
from routing_flow.lib.topology.status_client import StatusClient
from routing_flow.lib.topology.topology_resolver import Topology

STATUS = {
    "config": {"lan": "br-lan", "wan0": "eth0", "wan1": "eth1"},
    "mappings": {"192.168.1.20": "wan0", "192.168.1.21": "wan1", "192.168.1.30": "wan5"},
}


def session_returning(payload=None, error=None, status=200):
    session = MagicMock()
    if error is not None:
        session.get.side_effect = error
        return session
    resp = MagicMock()
    resp.json.return_value = payload
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status}")
    session.get.return_value = resp
    return session


def test_resolves_flow_through_uplink_to_interface():
    topology = Topology(
        flow_to_uplink={"10.0.0.1": "wan0", "10.0.0.2": "wan3"},
        uplink_to_interface={"wan0": "eth0", "wan1": "eth1"},
    )

    assert topology.resolve_interface("10.0.0.1") == "eth0"
    assert topology.resolve_interface("10.0.0.2") is None
    assert topology.resolve_interface("10.9.9.9") is None


def test_inverse_lookup_prefers_smallest_uplink_id():
    topology = Topology(uplink_to_interface={"wan1": "eth0", "wan0": "eth0", "wan2": "eth2"})

    assert topology.uplink_for_interface("eth0") == "wan0"
    assert topology.uplink_for_interface("eth2") == "wan2"
    assert topology.uplink_for_interface("eth9") is None


def test_status_client_builds_topology():
    client = StatusClient("http://router/status", ["wan0", "wan1"], session=session_returning(STATUS))

    topology = client.fetch_topology()

    assert topology.uplink_to_interface == {"wan0": "eth0", "wan1": "eth1"}
    assert topology.flow_to_uplink["192.168.1.21"] == "wan1"
    assert topology.resolve_interface("192.168.1.30") is None


def test_status_client_supports_more_than_two_uplinks():
    payload = {"config": {"wan0": "eth0", "wan1": "eth1", "wan2": "ppp0"}, "mappings": {"10.0.0.5": "wan2"}}
    client = StatusClient("http://router/status", ["wan0", "wan1", "wan2"], session=session_returning(payload))

    assert client.fetch_topology().resolve_interface("10.0.0.5") == "ppp0"


def test_nic_config_fills_uplinks_missing_from_status():
    payload = {"config": {"wan0": "eth0"}, "mappings": {}}
    client = StatusClient(
        "http://router/status", ["wan0", "wan1"],
        nic_config={"wan0": "ignored", "wan1": "eth7"},
        session=session_returning(payload),
    )

    assert client.fetch_topology().uplink_to_interface == {"wan0": "eth0", "wan1": "eth7"}


def test_transport_error_raises_topology_fetch_error():
    client = StatusClient("http://router/status", ["wan0"],
                          session=session_returning(error=requests.ConnectionError("refused")))

    with pytest.raises(TopologyFetchError, match="refused"):
        client.fetch_topology()


def test_http_error_raises_topology_fetch_error():
    client = StatusClient("http://router/status", ["wan0"], session=session_returning({}, status=502))

    with pytest.raises(TopologyFetchError):
        client.fetch_topology()


def test_malformed_payload_raises_topology_fetch_error():
    client = StatusClient("http://router/status", ["wan0"],
                          session=session_returning({"config": "eth0", "mappings": {}}))

    with pytest.raises(TopologyFetchError):
        client.fetch_topology()
