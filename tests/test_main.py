import pytest
from fastapi.testclient import TestClient

from logthreat import main

client = TestClient(main.app)

BODY = {
    "files": [
        {"name": "auth.log", "content": "2024-03-16 02:00:00 Failed login from 10.0.0.5"},
        {"name": "pending.log"},
    ]
}


@pytest.fixture
def fresh_state(monkeypatch):
    monkeypatch.setattr(main, "latest_result", None)
    monkeypatch.setattr(main, "latest_payload", '{"status": "not analyzed"}')


def test_analyze_returns_result():
    resp = client.post("/api/analyze", json=BODY)
    assert resp.status_code == 200
    data = resp.json()
    assert data["summary"]["total"] == 1
    assert data["events"][0]["kind"] == "brute-force"
    assert data["events"][0]["timestamp_inferred"] is False
    assert data["top_addresses"] == [{"address": "10.0.0.5", "attempts": 1, "location": "Internal"}]
    assert len(data["timeline"]) == 6
    assert data["files_analyzed"] == 2


def test_analyze_rejects_bad_body():
    resp = client.post("/api/analyze", json={"files": [{"content": "no name"}]})
    assert resp.status_code == 422


def test_report_is_csv_attachment():
    resp = client.post("/api/report", json=BODY)
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert "security_analysis_" in resp.headers["content-disposition"]
    assert resp.text.startswith('"Security Analysis Report"\n')


def test_analysis_before_reload(fresh_state):
    assert client.get("/api/analysis").json() == {"status": "not analyzed"}
    assert client.get("/api/analysis/report").status_code == 404


def test_reload_reads_log_dir(fresh_state, monkeypatch, tmp_path):
    (tmp_path / "a.log").write_text("port 22 scan detected from 8.8.8.8\n")
    (tmp_path / "b.log").write_text("192.168.1.50 blocked malware attempt\n")
    monkeypatch.setattr(main, "LOG_DIR", tmp_path)

    assert client.post("/api/reload").json() == {"status": "reloaded"}

    data = client.get("/api/analysis").json()
    assert [e["kind"] for e in data["events"]] == ["scan", "suspicious"]
    assert data["summary"] == {"total": 2, "critical": 0, "high": 1, "medium": 1, "low": 0}

    report = client.get("/api/analysis/report")
    assert report.status_code == 200
    assert '"Files Analyzed:","2"' in report.text


def test_reload_missing_dir(fresh_state, monkeypatch, tmp_path):
    monkeypatch.setattr(main, "LOG_DIR", tmp_path / "missing")
    client.post("/api/reload")
    data = client.get("/api/analysis").json()
    assert data["error"] == "Log directory not found"
    assert client.get("/api/analysis/report").status_code == 404


def test_reload_failure_is_500(fresh_state, monkeypatch, tmp_path):
    def boom(*args, **kwargs):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(main, "LOG_DIR", tmp_path)
    monkeypatch.setattr(main, "load_log_dir", boom)
    resp = client.post("/api/reload")
    assert resp.status_code == 500
    assert resp.json()["detail"] == "disk on fire"
