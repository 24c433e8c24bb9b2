"""Tests for compound identifier parsing."""

import pytest

from fleetsync.errors import InvalidIdentifierError
from fleetsync.identifiers import (
    format_peering_authorization_id,
    format_peering_connection_id,
    parse_peering_authorization_id,
    parse_peering_connection_id,
    parse_port_rule,
)
from fleetsync.models import IpPermission, Protocol


def test_invalid_identifier_is_a_value_error():
    with pytest.raises(ValueError):
        parse_peering_connection_id("nope")


def test_peering_connection_id():
    value = format_peering_connection_id("fleet-1", "123456789012", "vpc-abc")

    assert value == "fleet-1/123456789012/vpc-abc"
    assert parse_peering_connection_id(value) == ("fleet-1", "123456789012", "vpc-abc")


@pytest.mark.parametrize("value", ["fleet-1/vpc-abc", "a//c", "a/b/c/d"])
def test_peering_connection_id_invalid(value):
    with pytest.raises(InvalidIdentifierError):
        parse_peering_connection_id(value)


def test_peering_authorization_id():
    value = format_peering_authorization_id("123456789012", "vpc-abc")

    assert parse_peering_authorization_id(value) == ("123456789012", "vpc-abc")
    with pytest.raises(InvalidIdentifierError):
        parse_peering_authorization_id("123456789012")


def test_parse_port_rule_single_port():
    assert parse_port_rule("tcp:8443:192.168.0.0/24") == IpPermission(
        8443, 8443, "192.168.0.0/24", Protocol.TCP
    )


def test_parse_port_rule_range():
    assert parse_port_rule("UDP:7000-7100:10.0.0.0/8") == IpPermission(
        7000, 7100, "10.0.0.0/8", Protocol.UDP
    )


@pytest.mark.parametrize(
    "value",
    [
        "TCP:8443",
        "ICMP:8443:10.0.0.0/8",
        "TCP:abc:10.0.0.0/8",
        "TCP:9000-8000:10.0.0.0/8",
        "TCP:70000:10.0.0.0/8",
        "TCP:8443:not-a-cidr",
    ],
)
def test_parse_port_rule_invalid(value):
    with pytest.raises(InvalidIdentifierError):
        parse_port_rule(value)
