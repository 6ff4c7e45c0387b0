from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from datetime import datetime
import logging
import time

from . import config
from .errors import InvalidParameterError, ItemExecutionError
from .models import ExecuteRequest, ExecuteResponse
from .services.executor import ItemExecutor

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="Crawl and Scrape", version="0.1.0")

# CORS für den Workflow-Host
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health Check Endpoints
@app.get("/health/ready")
async def health_ready():
    """Readiness check endpoint"""
    return {"status": "ready", "timestamp": datetime.now().isoformat()}


@app.get("/health/live")
async def health_live():
    """Liveness check endpoint"""
    return {"status": "alive", "timestamp": datetime.now().isoformat()}


@app.post("/api/execute", response_model=ExecuteResponse)
async def execute_endpoint(request: ExecuteRequest):
    """
    Führt den Node für alle Input-Items aus (sequentiell, ein Fetch pro Item).

    Fehlerbehandlung:
    - continue_on_fail: Fehler stehen im Ergebnis des jeweiligen Items
    - sonst: 400 (ungültige Parameter) bzw. 502 (Fetch fehlgeschlagen)
      mit item_index im Fehler-Detail
    """
    start_time = time.time()
    executor = ItemExecutor()

    try:
        results = await executor.execute_items(request.items, continue_on_fail=request.continue_on_fail)
    except ItemExecutionError as e:
        elapsed_time = time.time() - start_time
        logger.error(f"Execution aborted at item {e.item_index} after {elapsed_time:.2f}s: {e}")
        status_code = 400 if isinstance(e.cause, InvalidParameterError) else 502
        raise HTTPException(
            status_code=status_code,
            detail={
                "error": {
                    "code": e.code,
                    "message": str(e),
                    "item_index": e.item_index,
                }
            },
        ) from e

    elapsed_time = time.time() - start_time
    logger.info(f"Execution finished: {len(results)} item(s) in {elapsed_time:.2f}s")
    return ExecuteResponse(ok=True, results=results)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
