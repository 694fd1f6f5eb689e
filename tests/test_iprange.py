import pytest

from reconlens.iprange import expand_ip_range, is_public_ip, public_candidates


@pytest.mark.parametrize("ip", ["10.0.0.1", "172.20.1.1", "192.168.1.1", "127.0.0.1", "0.1.1.1",
                                "224.0.0.1", "255.255.255.255", "172.16.0.1", "172.31.255.255"])
def test_private_and_reserved_rejected(ip):
    assert not is_public_ip(ip)


@pytest.mark.parametrize("ip", ["8.8.8.8", "1.1.1.1", "172.15.0.1", "172.32.0.1", "223.255.255.254"])
def test_public_accepted(ip):
    assert is_public_ip(ip)


@pytest.mark.parametrize("ip", ["", "8.8.8", "8.8.8.8.8", "8.8.8.256", "a.b.c.d", "8.8.-1.8", " ", "8..8.8"])
def test_malformed_rejected(ip):
    assert not is_public_ip(ip)


def test_single_ip():
    assert expand_ip_range(" 8.8.8.8 ") == ["8.8.8.8"]


def test_full_range():
    assert expand_ip_range("1.2.3.1-1.2.3.5") == ["1.2.3.1", "1.2.3.2", "1.2.3.3", "1.2.3.4", "1.2.3.5"]


def test_last_octet_shorthand():
    assert expand_ip_range("1.2.3.1-3") == ["1.2.3.1", "1.2.3.2", "1.2.3.3"]


def test_range_crosses_octet_boundary():
    assert expand_ip_range("1.2.3.254-1.2.4.1") == ["1.2.3.254", "1.2.3.255", "1.2.4.0", "1.2.4.1"]


def test_range_is_capped():
    ips = expand_ip_range("8.8.0.0-8.8.255.255")
    assert len(ips) == 16
    assert ips[0] == "8.8.0.0"
    assert ips[-1] == "8.8.0.15"
    assert len(expand_ip_range("8.8.8.1-8.8.8.10", limit=4)) == 4


@pytest.mark.parametrize("expr", ["1.2.3.x-5", "1.2.3.1-abc", "1.2.3-1.2.3.9", "1.2.3.1-1.2.x.9", "", "1.2.3.1-300"])
def test_unparseable_ranges_give_empty(expr):
    assert expand_ip_range(expr) == []


def test_reversed_range_is_empty():
    assert expand_ip_range("1.2.3.9-1.2.3.1") == []


def test_public_candidates_filters_private():
    assert public_candidates("10.0.0.1-3") == []
    assert public_candidates("172.31.255.254-172.32.0.1") == ["172.32.0.0", "172.32.0.1"]


def test_every_candidate_is_public_and_bounded():
    for expr in ("8.8.8.0-8.8.9.255", "126.255.255.250-128.0.0.5", "9.255.255.250-10.0.0.10"):
        out = public_candidates(expr)
        assert len(out) <= 16
        assert all(is_public_ip(ip) for ip in out)
