import asyncio

import pytest
from fastapi.testclient import TestClient

from dirprobe import scanner, wordlists
from dirprobe.main import JOBS, app
from dirprobe.models import ProbeOutcome


@pytest.fixture
def client(monkeypatch):
    async def fake_probe(session, url, config):
        if url.endswith("/admin"):
            return ProbeOutcome(url=url, status=301, location="/admin/")
        return ProbeOutcome(url=url, status=404)

    monkeypatch.setattr(scanner, "probe", fake_probe)
    with TestClient(app) as c:
        yield c
    JOBS.clear()


def drain(client, job_id):
    events = []
    with client.websocket_connect(f"/ws/{job_id}") as ws:
        while True:
            ev = ws.receive_json()
            events.append(ev)
            if ev["type"] in ("done", "error", "canceled"):
                return events


def test_scan_streams_found_then_done(client):
    r = client.post("/api/scan", json={"url": "http://h/", "words": ["admin", "nothing"], "extensions": ["txt"]})
    assert r.status_code == 200
    events = drain(client, r.json()["job_id"])
    found = [e["item"] for e in events if e["type"] == "found"]
    assert [(f["url"], f["status"], f["location"]) for f in found] == [("http://h/admin", 301, "/admin/")]
    done = events[-1]
    assert done["type"] == "done"
    assert done["summary"]["total"] == 4
    assert done["summary"]["interesting"] == 1


@pytest.fixture
def lists_dir(tmp_path, monkeypatch):
    root = tmp_path / "lists"
    root.mkdir()
    monkeypatch.setattr(wordlists, "WORDLIST_DIR", root)
    return root


def test_wordlist_from_configured_directory(client, lists_dir):
    (lists_dir / "w.txt").write_text("admin\n# skip\n\n", encoding="utf-8")
    r = client.post("/api/scan", json={"url": "http://h/", "wordlist": "w.txt"})
    events = drain(client, r.json()["job_id"])
    assert events[-1]["summary"]["total"] == 1


@pytest.mark.parametrize("name", ["../secret.txt", "SECRET_ABSOLUTE"])
def test_wordlist_outside_directory_is_refused(client, lists_dir, name):
    secret = lists_dir.parent / "secret.txt"
    secret.write_text("SECRET_TOKEN\n", encoding="utf-8")
    if name == "SECRET_ABSOLUTE":
        name = str(secret)
    r = client.post("/api/scan", json={"url": "http://h/", "wordlist": name})
    assert r.status_code == 422
    assert "wordlist directory" in r.json()["detail"]
    assert JOBS == {}


def test_missing_wordlist_reports_error(client, lists_dir):
    r = client.post("/api/scan", json={"url": "http://h/", "wordlist": "nope.txt"})
    events = drain(client, r.json()["job_id"])
    assert events[-1]["type"] == "error"
    assert "cannot read wordlist" in events[-1]["message"]


def test_inline_words_are_trimmed_and_filtered(client, monkeypatch):
    probed = []

    async def recording_probe(session, url, config):
        probed.append(url)
        return ProbeOutcome(url=url, status=404)

    monkeypatch.setattr(scanner, "probe", recording_probe)
    r = client.post("/api/scan", json={"url": "http://h/", "words": ["", "# comment", "  admin  "]})
    events = drain(client, r.json()["job_id"])
    assert probed == ["http://h/admin"]
    assert events[-1]["summary"]["total"] == 1


def test_blank_inline_words_count_as_missing(client):
    assert client.post("/api/scan", json={"url": "http://h/", "words": ["", "  ", "#x"]}).status_code == 422


def test_cancel_running_job(client, monkeypatch):
    async def stalled_probe(session, url, config):
        await asyncio.sleep(30)
        return ProbeOutcome(url=url, status=200)

    monkeypatch.setattr(scanner, "probe", stalled_probe)
    r = client.post("/api/scan", json={"url": "http://h/", "words": ["admin"]})
    job_id = r.json()["job_id"]
    assert client.delete(f"/api/scan/{job_id}").json() == {"status": "canceled"}
    events = drain(client, job_id)
    assert events == [{"type": "canceled"}]


@pytest.mark.parametrize("body", [
    {"url": "http://h/", "words": ["a"], "concurrency": 0},
    {"url": "http://h/", "words": ["a"], "timeout_seconds": 0},
    {"url": "ftp://h/", "words": ["a"]},
    {"url": "http://h/"},
])
def test_invalid_requests_are_rejected(client, body):
    assert client.post("/api/scan", json=body).status_code == 422


def test_unknown_job(client):
    with client.websocket_connect("/ws/missing") as ws:
        assert ws.receive_json() == {"type": "error", "message": "unknown job"}
    assert client.delete("/api/scan/missing").status_code == 404
