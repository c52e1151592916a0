import asyncio, uuid, traceback, logging
from typing import Dict, List

from fastapi import FastAPI, WebSocket, WebSocketDisconnect, HTTPException

from .errors import ScanSetupError, WordlistError
from .models import ProbeOutcome, ScanRequest
from .results import is_interesting
from .scanner import scan
from .wordlists import read_wordlist, resolve_wordlist

log = logging.getLogger("dirprobe.main")

app = FastAPI(title="dirprobe")

JOBS: Dict[str, Dict] = {}


@app.post("/api/scan")
async def start_scan(req: ScanRequest):
    wordlist = None
    if req.wordlist:
        try:
            wordlist = resolve_wordlist(req.wordlist)
        except WordlistError as e:
            raise HTTPException(status_code=422, detail=str(e))
    job_id = str(uuid.uuid4())
    q: asyncio.Queue = asyncio.Queue()
    JOBS[job_id] = {"queue": q}
    config = req.to_config()

    async def emit(ev):
        if ev.get("type") == "found":
            item = ev.get("item", {})
            log.info("Found: %s %s", item.get("status"), item.get("url"))
        elif ev.get("type") == "error":
            log.error("Job %s failed: %s", job_id, ev.get("message"))
        await q.put(ev)

    async def on_outcome(outcome: ProbeOutcome):
        if is_interesting(outcome, config.interesting_statuses):
            await emit({"type": "found", "item": outcome.model_dump(mode="json")})

    async def run():
        try:
            words: List[str] = list(req.words)
            if wordlist:
                words += await asyncio.to_thread(read_wordlist, wordlist)
            summary = await scan(str(req.url), words, config, on_outcome)
            await emit({"type": "done", "summary": summary.model_dump()})
        except asyncio.CancelledError:
            await q.put({"type": "canceled"})
        except ScanSetupError as e:
            await emit({"type": "error", "message": str(e)})
        except Exception:
            await emit({"type": "error", "message": traceback.format_exc()})
        finally:
            await q.put(None)

    JOBS[job_id]["task"] = asyncio.create_task(run())
    return {"job_id": job_id}


@app.websocket("/ws/{job_id}")
async def ws_results(ws: WebSocket, job_id: str):
    await ws.accept()
    if job_id not in JOBS:
        await ws.send_json({"type": "error", "message": "unknown job"})
        await ws.close(); return
    q: asyncio.Queue = JOBS[job_id]["queue"]
    try:
        while True:
            ev = await q.get()
            if ev is None: break
            await ws.send_json(ev)
        await ws.close()
    except WebSocketDisconnect:
        pass
    finally:
        JOBS.pop(job_id, None)


@app.delete("/api/scan/{job_id}")
async def cancel(job_id: str):
    job = JOBS.get(job_id)
    if not job: raise HTTPException(status_code=404, detail="unknown job")
    task = job.get("task")
    if task: task.cancel()
    await job["queue"].put({"type": "canceled"})
    await job["queue"].put(None)
    return {"status": "canceled"}
