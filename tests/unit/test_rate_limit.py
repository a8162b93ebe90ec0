"""Unit tests for rate-limit key derivation."""

from unittest.mock import MagicMock, patch

import pytest

from app.core.rate_limit import client_ip, normalize_ip, rate_limit_key


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("203.0.113.7", "203.0.113.7"),
        (" 203.0.113.7 ", "203.0.113.7"),
        ("::ffff:10.0.0.1", "10.0.0.1"),
        ("2001:0db8:0000:0042:0000:8a2e:0370:7334", "2001:db8:0:42"),
        ("2001:db8::1", "2001:db8:0:0"),
        ("", "unknown"),
        (None, "unknown"),
        ("testclient", "testclient"),
    ],
)
def test_normalize_ip(raw, expected):
    assert normalize_ip(raw) == expected


def test_same_ipv6_network_shares_a_key():
    assert normalize_ip("2001:db8:1:2::a") == normalize_ip("2001:db8:1:2:ffff::b")


def _request(forwarded=None, host="198.51.100.4"):
    request = MagicMock()
    request.headers = {"X-Forwarded-For": forwarded} if forwarded else {}
    request.client.host = host
    request.url.path = "/api/v1/auth/login"
    return request


def test_client_ip_ignores_forwarded_header_by_default():
    with patch("app.core.rate_limit.settings") as mock_settings:
        mock_settings.TRUST_PROXY_HEADERS = False
        assert client_ip(_request(forwarded="203.0.113.9")) == "198.51.100.4"


def test_client_ip_uses_first_forwarded_hop_behind_proxy():
    with patch("app.core.rate_limit.settings") as mock_settings:
        mock_settings.TRUST_PROXY_HEADERS = True
        assert client_ip(_request(forwarded="203.0.113.9, 10.0.0.2")) == "203.0.113.9"
        assert client_ip(_request()) == "198.51.100.4"


def test_rate_limit_key_normalizes():
    with patch("app.core.rate_limit.settings") as mock_settings:
        mock_settings.TRUST_PROXY_HEADERS = True
        assert rate_limit_key(_request(forwarded="::ffff:192.0.2.1")) == "192.0.2.1"
