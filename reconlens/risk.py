from typing import Dict, NamedTuple


class Service(NamedTuple):
    name: str
    probe: str = ""


HTTP_PROBE = "GET / HTTP/1.1\r\nHost: {host}\r\nConnection: close\r\n\r\n"

PORT_SERVICES: Dict[int, Service] = {
    21: Service("FTP"),
    22: Service("SSH"),
    25: Service("SMTP"),
    80: Service("HTTP", HTTP_PROBE),
    110: Service("POP3"),
    143: Service("IMAP"),
    443: Service("HTTPS"),
    993: Service("IMAPS"),
    995: Service("POP3S"),
    3306: Service("MySQL"),
    3389: Service("RDP"),
    5432: Service("PostgreSQL"),
    6379: Service("Redis"),
    8080: Service("HTTP-Proxy", HTTP_PROBE),
    8443: Service("HTTPS-Alt"),
    27017: Service("MongoDB"),
}

SENSITIVE_PORTS = frozenset({21, 22, 23, 25, 3306, 5432, 6379, 27017, 3389, 445, 1433})
DATABASE_PORTS = frozenset({3306, 5432, 27017, 6379})
DEFAULT_BANNER_MARKERS = ("default", "admin", "root", "test", "welcome", "unauthorized")
VERSION_MARKERS = ("version", "server:")


def service_name(port: int) -> str:
    svc = PORT_SERVICES.get(port)
    return svc.name if svc else "Unknown"


def service_probe(port: int, host: str) -> str:
    """Probe payload to send after connecting, or "" to just listen."""
    svc = PORT_SERVICES.get(port)
    if not svc or not svc.probe:
        return ""
    return svc.probe.replace("{host}", host)


def risk_score(port: int, banner: str) -> int:
    score = 0
    low = (banner or "").lower()
    if port in SENSITIVE_PORTS:
        score += 40
    if any(m in low for m in DEFAULT_BANNER_MARKERS):
        score += 20
    if port in DATABASE_PORTS:
        score += 25
    if any(m in low for m in VERSION_MARKERS):
        score += 15
    return min(score, 100)
