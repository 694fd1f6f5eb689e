import pytest

from reconlens.risk import risk_score, service_name, service_probe


@pytest.mark.parametrize("port,banner,expected", [
    (80, "", 0),
    (22, "", 40),
    (3306, "", 65),
    (6379, "", 65),
    (443, "Server: nginx", 15),
    (8080, "Welcome to the admin panel", 20),
    (3306, "5.7.33 root access denied, Server: mysql version", 100),
    (23, "Default login", 60),
])
def test_risk_score(port, banner, expected):
    assert risk_score(port, banner) == expected


def test_risk_score_is_deterministic_and_bounded():
    banners = ["", "admin", "SERVER: x VERSION 1", "welcome root test default unauthorized"]
    for port in (21, 22, 80, 443, 1433, 3306, 5432, 6379, 27017, 65535):
        for banner in banners:
            first = risk_score(port, banner)
            assert first == risk_score(port, banner)
            assert 0 <= first <= 100


def test_risk_score_handles_none_banner():
    assert risk_score(5432, None) == 65


def test_service_lookup():
    assert service_name(443) == "HTTPS"
    assert service_name(27017) == "MongoDB"
    assert service_name(53) == "Unknown"


def test_service_probe_only_for_http_ports():
    assert service_probe(80, "8.8.8.8") == "GET / HTTP/1.1\r\nHost: 8.8.8.8\r\nConnection: close\r\n\r\n"
    assert "Host: 1.1.1.1" in service_probe(8080, "1.1.1.1")
    assert service_probe(22, "8.8.8.8") == ""
    assert service_probe(9999, "8.8.8.8") == ""
