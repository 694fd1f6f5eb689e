from typing import List, Optional

from . import config


def _octets(text: str) -> Optional[List[int]]:
    parts = text.strip().split(".")
    if not all(p.isascii() and p.isdigit() for p in parts):
        return None
    return [int(p) for p in parts]


def is_public_ip(ip: str) -> bool:
    """
    Allow-by-exclusion: only plain public unicast IPv4 passes.
    Rejects malformed input, 10/8, 172.16/12, 192.168/16, 127/8, 0/8 and 224+.
    """
    octs = _octets(ip)
    if octs is None or len(octs) != 4 or any(o > 255 for o in octs):
        return False
    a, b = octs[0], octs[1]
    if a == 10:
        return False
    if a == 172 and 16 <= b <= 31:
        return False
    if a == 192 and b == 168:
        return False
    if a == 127:
        return False
    if a == 0 or a >= 224:
        return False
    return True


def _pack(octs: List[int]) -> int:
    return (octs[0] << 24) | (octs[1] << 16) | (octs[2] << 8) | octs[3]


def _unpack(n: int) -> str:
    return f"{(n >> 24) & 255}.{(n >> 16) & 255}.{(n >> 8) & 255}.{n & 255}"


def expand_ip_range(expr: str, limit: int = config.MAX_RANGE_IPS) -> List[str]:
    """
    Expand ``a.b.c.d``, ``a.b.c.d-e.f.g.h`` or ``a.b.c.d-N`` into at most
    ``limit`` addresses, in ascending order.

    Unparseable endpoints yield an empty list. A single address is returned
    as-is; callers filter everything through :func:`is_public_ip`.
    """
    trimmed = (expr or "").strip()
    if not trimmed:
        return []
    if "-" not in trimmed:
        return [trimmed]

    start_part, end_part = trimmed.split("-", 1)
    start = _octets(start_part)
    if start is None or len(start) != 4:
        return []
    end_part = end_part.strip()
    if "." in end_part:
        end = _octets(end_part)
    else:
        last = _octets(end_part)
        end = start[:3] + last if last is not None else None
    if end is None or len(end) != 4:
        return []
    if any(o > 255 for o in start + end):
        return []

    ips: List[str] = []
    n, stop = _pack(start), _pack(end)
    while n <= stop and len(ips) < limit:
        ips.append(_unpack(n))
        n += 1
    return ips


def public_candidates(expr: str, limit: int = config.MAX_RANGE_IPS) -> List[str]:
    return [ip for ip in expand_ip_range(expr, limit) if is_public_ip(ip)]
