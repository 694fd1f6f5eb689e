import asyncio, json, logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Sequence

from . import config
from .errors import PersistenceError
from .models import PortScanFinding

log = logging.getLogger("reconlens.store")


def _rows(session_id: str, findings: Sequence[PortScanFinding]) -> List[Dict]:
    now = datetime.now(timezone.utc).isoformat()
    return [{**f.model_dump(), "scan_session_id": session_id, "created_at": now} for f in findings]


class FindingStore:
    """Batch sink for port-scan findings. The engines never read it back."""

    async def insert_many(self, session_id: str, findings: Sequence[PortScanFinding]) -> int:
        raise NotImplementedError


class MemoryFindingStore(FindingStore):
    def __init__(self):
        self.rows: List[Dict] = []

    async def insert_many(self, session_id: str, findings: Sequence[PortScanFinding]) -> int:
        rows = _rows(session_id, findings)
        self.rows.extend(rows)
        return len(rows)


class JsonlFindingStore(FindingStore):
    """Appends one JSON object per finding to a local file."""

    def __init__(self, path: Path = config.STORE_FILE):
        self.path = Path(path)

    def _append(self, rows: List[Dict]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as fh:
            for row in rows:
                fh.write(json.dumps(row, ensure_ascii=False) + "\n")

    async def insert_many(self, session_id: str, findings: Sequence[PortScanFinding]) -> int:
        rows = _rows(session_id, findings)
        try:
            await asyncio.to_thread(self._append, rows)
        except OSError as e:
            raise PersistenceError(str(e)) from e
        log.info("Stored %d findings for session %s in %s", len(rows), session_id, self.path)
        return len(rows)
