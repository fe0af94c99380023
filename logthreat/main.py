import logging
from fastapi import FastAPI, HTTPException
from fastapi.responses import Response
from typing import Optional
from .analysis import classify
from .config import HOST, LOG_DIR, LOG_PATTERN, PORT
from .models import AnalysisResult, AnalyzeRequest
from .parser import load_log_dir
from .report import render_csv, report_filename
import json

logging.basicConfig(level=logging.INFO, format='[%(asctime)s] %(levelname)s %(message)s')
logger = logging.getLogger(__name__)

app = FastAPI(title="Log Threat Analyzer")

latest_result: Optional[AnalysisResult] = None
latest_payload: str = json.dumps({"status": "not analyzed"})


def perform_analysis() -> None:
    global latest_result, latest_payload
    if not LOG_DIR.is_dir():
        latest_result = None
        latest_payload = json.dumps({"error": "Log directory not found", "path": str(LOG_DIR)})
        return
    logger.info("Analyzing log directory: %s (%s)", LOG_DIR, LOG_PATTERN)
    files = load_log_dir(LOG_DIR, LOG_PATTERN)
    logger.info("Loaded %d files", len(files))
    latest_result = classify(files)
    latest_payload = latest_result.model_dump_json()


def _csv_response(result: AnalysisResult) -> Response:
    return Response(
        content=render_csv(result),
        media_type='text/csv; charset=utf-8',
        headers={'Content-Disposition': f'attachment; filename="{report_filename()}"'},
    )


@app.on_event('startup')
async def startup_event():
    perform_analysis()


@app.get('/api/analysis')
async def get_analysis():
    return json.loads(latest_payload)


@app.get('/api/analysis/report')
async def get_analysis_report():
    if latest_result is None:
        raise HTTPException(status_code=404, detail="No analysis available")
    return _csv_response(latest_result)


@app.post('/api/reload')
async def reload_analysis():
    try:
        perform_analysis()
        return {"status": "reloaded"}
    except Exception as e:
        logger.exception("Reload failed")
        raise HTTPException(status_code=500, detail=str(e))


@app.post('/api/analyze', response_model=AnalysisResult)
async def analyze(request: AnalyzeRequest):
    logger.info("Analyzing %d posted files", len(request.files))
    return classify(request.files)


@app.post('/api/report')
async def analyze_report(request: AnalyzeRequest):
    return _csv_response(classify(request.files))


if __name__ == '__main__':
    import uvicorn
    uvicorn.run('logthreat.main:app', host=HOST, port=PORT)
