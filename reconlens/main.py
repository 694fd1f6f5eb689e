import asyncio, uuid, traceback, logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request, WebSocket, WebSocketDisconnect
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from . import config
from .crawler import CrawlEngine, CrawlTarget
from .errors import InputError, PersistenceError
from .models import CrawlRequest, PortScanRequest, ScanSession
from .portscan import PortScanEngine
from .steps import SUCCESS, WARNING, step_type
from .store import FindingStore, JsonlFindingStore

# Basic logging
logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
log = logging.getLogger("reconlens.main")

app = FastAPI(title="ReconLens")

JOBS: Dict[str, Dict] = {}


def get_crawler() -> CrawlEngine:
    return CrawlEngine()


def get_scanner() -> PortScanEngine:
    return PortScanEngine()


def get_store() -> FindingStore:
    return JsonlFindingStore()


def _error(status: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"error": message})


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    parts = []
    for e in exc.errors():
        where = ".".join(str(x) for x in e.get("loc", ())[1:]) or "body"
        parts.append(f"{where}: {e.get('msg')}")
    return _error(400, "; ".join(parts) or "invalid request")


@app.exception_handler(InputError)
async def input_error(request: Request, exc: InputError):
    return _error(400, str(exc))


async def persist(store: FindingStore, session: ScanSession) -> List[str]:
    """Hand the findings to the store; returns the step lines describing the outcome."""
    if not session.results:
        return []
    try:
        n = await store.insert_many(session.session_id, session.results)
    except PersistenceError as e:
        log.warning("Storing session %s failed: %s", session.session_id, e)
        return [f"{WARNING} Database storage error: {e}"]
    return [f"{SUCCESS} {n} results indexed in database"]


async def _scan_payload(req: PortScanRequest, scanner: PortScanEngine, store: FindingStore,
                        cancel: Optional[asyncio.Event] = None, on_step=None) -> Dict[str, Any]:
    session = await scanner.run(req.ip_range, req.ports, cancel=cancel, on_step=on_step)
    extra = await persist(store, session)
    if on_step:
        for line in extra:
            on_step(line)
    payload = session.model_dump()
    payload["steps"] = session.steps + extra
    return payload


@app.post("/api/crawl")
async def crawl(req: CrawlRequest, crawler: CrawlEngine = Depends(get_crawler)):
    target = CrawlTarget.from_url(req.url, req.depth, req.max_pages)
    try:
        result = await crawler.run(target)
    except Exception as e:
        log.exception("Crawl of %s failed", target.url)
        return _error(500, str(e) or "Unknown error")
    return result.model_dump()


@app.post("/api/portscan")
async def portscan(req: PortScanRequest, scanner: PortScanEngine = Depends(get_scanner),
                   store: FindingStore = Depends(get_store)):
    try:
        return await _scan_payload(req, scanner, store)
    except InputError:
        raise
    except Exception as e:
        log.exception("Port scan of %s failed", req.ip_range)
        return _error(500, str(e) or "Unknown error")


def _expire_job(job_id: str) -> None:
    job = JOBS.get(job_id)
    if job and not job["attached"]:
        JOBS.pop(job_id, None)
        log.info("Job %s expired without a consumer", job_id)


def _start_job(work: Callable[[asyncio.Event, Callable[[str], None]], Awaitable[Dict]]) -> str:
    job_id = str(uuid.uuid4())
    q: asyncio.Queue = asyncio.Queue()
    cancel = asyncio.Event()
    JOBS[job_id] = {"queue": q, "cancel": cancel, "attached": False}

    def emit(line: str):
        q.put_nowait({"type": "step", "line": line, "kind": step_type(line)})

    async def run():
        try:
            result = await work(cancel, emit)
            await q.put({"type": "done", "result": result})
            log.info("Job %s done", job_id)
        except asyncio.CancelledError:
            await q.put({"type": "canceled"})
        except InputError as e:
            await q.put({"type": "error", "message": str(e)})
        except Exception:
            log.exception("Job %s failed", job_id)
            await q.put({"type": "error", "message": traceback.format_exc()})
        finally:
            await q.put(None)
            asyncio.get_running_loop().call_later(config.JOB_GRACE, _expire_job, job_id)

    JOBS[job_id]["task"] = asyncio.create_task(run())
    return job_id


@app.post("/api/crawl/jobs")
async def start_crawl_job(req: CrawlRequest, crawler: CrawlEngine = Depends(get_crawler)):
    target = CrawlTarget.from_url(req.url, req.depth, req.max_pages)

    async def work(cancel, emit):
        result = await crawler.run(target, cancel=cancel, on_step=emit)
        return result.model_dump()

    return {"job_id": _start_job(work)}


@app.post("/api/portscan/jobs")
async def start_portscan_job(req: PortScanRequest, scanner: PortScanEngine = Depends(get_scanner),
                             store: FindingStore = Depends(get_store)):
    async def work(cancel, emit):
        return await _scan_payload(req, scanner, store, cancel=cancel, on_step=emit)

    return {"job_id": _start_job(work)}


@app.websocket("/ws/{job_id}")
async def ws_progress(ws: WebSocket, job_id: str):
    await ws.accept()
    if job_id not in JOBS:
        await ws.send_json({"type": "error", "message": "unknown job"})
        await ws.close(); return
    JOBS[job_id]["attached"] = True
    q: asyncio.Queue = JOBS[job_id]["queue"]
    try:
        while True:
            ev = await q.get()
            if ev is None: break
            await ws.send_json(ev)
    except WebSocketDisconnect:
        pass
    finally:
        await ws.close()
        JOBS.pop(job_id, None)


@app.delete("/api/jobs/{job_id}")
async def cancel(job_id: str):
    job = JOBS.get(job_id)
    if not job: raise HTTPException(status_code=404, detail="unknown job")
    # cooperative: the engine returns its partial result as a normal "done" event
    job["cancel"].set()
    return {"status": "cancelling"}


def run():
    import uvicorn
    uvicorn.run("reconlens.main:app", host=config.HOST, port=config.PORT)
