"""
Port scan engine.

For every public address in the requested range the engine fires the
geolocation lookup and one probe per port at the same time, waits for all
of them, then scores each open port and records a finding. Addresses are
processed one after another, so at most ``len(ports) + 1`` connections are
in flight at any moment.
"""
import asyncio, logging, uuid
from typing import Awaitable, Callable, List, Optional

from . import config
from .errors import InputError
from .geo import GeoLocator
from .iprange import expand_ip_range, is_public_ip
from .models import GeoInfo, PortScanFinding, ProbeResult, ScanSession
from .probe import probe_port
from .risk import risk_score, service_name
from .steps import StepCb, StepLog

log = logging.getLogger("reconlens.portscan")

ProbeFn = Callable[[str, int], Awaitable[ProbeResult]]
GeoFn = Callable[[str], Awaitable[Optional[GeoInfo]]]


class PortScanEngine:
    def __init__(self, probe: Optional[ProbeFn] = None, geolocate: Optional[GeoFn] = None):
        self.probe = probe or probe_port
        self.geolocate = geolocate or GeoLocator().lookup

    def _targets(self, ip_range: str) -> List[str]:
        if not ip_range or not ip_range.strip():
            raise InputError("ip_range is required")
        ips = expand_ip_range(ip_range)
        public = [ip for ip in ips if is_public_ip(ip)]
        if not public:
            raise InputError("No valid public IP addresses in range. Private/reserved IPs are not allowed.")
        return public

    @staticmethod
    def _ports(ports: Optional[List[int]]) -> List[int]:
        if ports is None:
            return list(config.DEFAULT_PORTS)
        if not ports:
            raise InputError("ports must not be empty")
        if len(ports) > config.MAX_PORTS:
            raise InputError(f"at most {config.MAX_PORTS} ports per scan")
        bad = [p for p in ports if not isinstance(p, int) or not 1 <= p <= 65535]
        if bad:
            raise InputError(f"invalid port(s): {', '.join(str(p) for p in bad)}")
        # keep first occurrence order
        return list(dict.fromkeys(ports))

    async def run(
        self,
        ip_range: str,
        ports: Optional[List[int]] = None,
        cancel: Optional[asyncio.Event] = None,
        on_step: Optional[StepCb] = None,
    ) -> ScanSession:
        """
        Scan ``ip_range`` on ``ports`` and assemble a ScanSession.

        Raises InputError before any network activity when the range or the
        port list is unusable. Cancellation is checked before each address;
        probes already started for the current address run to their own
        timeouts and their results are kept.
        """
        targets = self._targets(ip_range)
        scan_ports = self._ports(ports)

        session_id = str(uuid.uuid4())
        steps = StepLog(log, on_step)
        results: List[PortScanFinding] = []
        scanned = 0
        cancelled = False

        steps.system(f"Scan session {session_id[:8]} initialized")
        steps.system(f"Target IPs: {', '.join(targets)}")
        steps.system(f"Ports: {', '.join(str(p) for p in scan_ports)}")

        for ip in targets:
            if cancel is not None and cancel.is_set():
                cancelled = True
                steps.warning(f"Scan stopped by user, {len(targets) - scanned} host(s) not scanned")
                break

            steps.info(f"Scanning {ip}...")
            geo, *probes = await asyncio.gather(
                self.geolocate(ip),
                *(self.probe(ip, port) for port in scan_ports),
            )
            scanned += 1

            if geo:
                steps.success(f"Geolocation: {geo.country}, {geo.city} ({geo.organization})")
            else:
                steps.negative(f"No geolocation data for {ip}")

            for port, pr in zip(scan_ports, probes):
                if not pr.open:
                    steps.negative(f"{ip}:{port} closed")
                    continue
                service = service_name(port)
                risk = risk_score(port, pr.banner)
                shown = f" | {pr.banner[:60]}" if pr.banner else ""
                steps.success(f"{ip}:{port} OPEN — {service}{shown} [Risk: {risk}]")
                results.append(_finding(ip, port, service, pr.banner, risk, geo))

        steps.success(f"Scan complete — {len(results)} open ports found across {scanned} hosts")

        return ScanSession(
            session_id=session_id,
            steps=steps.lines,
            results=results,
            total_open=len(results),
            hosts_scanned=scanned,
            cancelled=cancelled,
        )


def _finding(ip: str, port: int, service: str, banner: str, risk: int,
             geo: Optional[GeoInfo]) -> PortScanFinding:
    extra = geo.model_dump() if geo else {}
    return PortScanFinding(
        ip=ip,
        port=port,
        service=service,
        banner=banner[:config.BANNER_MAX_CHARS],
        risk_score=risk,
        **extra,
    )
