import logging
import time
from collections import defaultdict
from typing import Any, Dict, List

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from api import results, storage, task_store
from api.config import check_transport_security, get_settings
from api.schemas import PredictRequest, PredictResponse, SampleModel, SubmitResponse
from api.services import get_session
from api.validators import ensure_synthetic_allowed, status_for
from pipeline.errors import AnnotationError
from pipeline.history import PREDEFINED_SAMPLES
from pipeline.runner import validate_request
from pipeline.states import state_legend
from worker.queue import get_queue
from worker.tasks import run_annotation

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

settings = get_settings()
check_transport_security(settings)

API_KEY_HEADER = "X-API-Key"
RATE_LIMIT_WINDOW_SECONDS = 60
_rate_limit_registry: Dict[str, List[float]] = defaultdict(list)

app = FastAPI(title="Secondary Structure Annotation API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):  # type: ignore[override]
    start_time = time.perf_counter()
    response = await call_next(request)
    elapsed = (time.perf_counter() - start_time) * 1000
    logger.info(
        "%s %s -> %s in %.2f ms",
        request.method,
        request.url.path,
        response.status_code,
        elapsed,
    )
    return response


def _enforce_rate_limit(identifier: str) -> None:
    now = time.monotonic()
    window_start = now - RATE_LIMIT_WINDOW_SECONDS
    recent = [ts for ts in _rate_limit_registry[identifier] if ts >= window_start]
    if len(recent) >= settings.rate_limit_per_minute:
        raise HTTPException(status_code=429, detail="Rate limit exceeded")
    recent.append(now)
    _rate_limit_registry[identifier] = recent


async def enforce_api_key(request: Request) -> str:
    provided_key = request.headers.get(API_KEY_HEADER, "")
    if settings.api_key and provided_key != settings.api_key:
        raise HTTPException(status_code=401, detail="Invalid API key")

    identifier = provided_key or (request.client.host if request.client else "anonymous")
    if settings.rate_limit_per_minute > 0:
        _enforce_rate_limit(identifier)
    return identifier


@app.exception_handler(AnnotationError)
async def annotation_error_handler(request: Request, exc: AnnotationError) -> JSONResponse:
    logger.info("Annotation error on %s: %s", request.url.path, exc.user_message)
    return JSONResponse(status_code=status_for(exc), content={"detail": exc.user_message})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on path %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "path": request.url.path},
    )


@app.get("/health")
async def health_check() -> Dict[str, str]:
    """Health check endpoint for uptime monitoring."""
    return {"status": "ok"}


@app.get("/states")
async def list_states() -> Dict[str, Dict[str, str]]:
    """Legend for the 8-state and 3-state tracks."""
    return {"8": state_legend("8"), "3": state_legend("3")}


@app.get("/samples")
async def list_samples() -> List[SampleModel]:
    return [SampleModel.from_record(record) for record in PREDEFINED_SAMPLES]


@app.get("/history")
async def get_history(identity: str = Depends(enforce_api_key)) -> List[SampleModel]:
    """Most recent distinct submissions of the calling client."""
    session = get_session(identity)
    return [SampleModel.from_record(record) for record in session.history]


@app.post("/predict")
async def predict(body: PredictRequest, identity: str = Depends(enforce_api_key)) -> PredictResponse:
    """Annotate a sequence or PDB entry and return the per-residue tracks."""

    ensure_synthetic_allowed(body.synthetic, settings.allow_synthetic)
    session = get_session(identity)
    result = await run_in_threadpool(session.submit, body.to_request())
    logger.info("Predicted %d residues for %s", len(result.annotations), result.display_identifier or "sequence")
    return PredictResponse.from_result(result)


@app.post("/submit")
async def submit(body: PredictRequest, _: str = Depends(enforce_api_key)) -> SubmitResponse:
    """Validate the input and enqueue a background annotation task."""

    ensure_synthetic_allowed(body.synthetic, settings.allow_synthetic)
    validated = validate_request(body.to_request())

    task_id = storage.generate_task_id()
    task_dir = storage.create_temp_directory(settings.storage_root, task_id)
    payload: Dict[str, Any] = {
        "sequence": validated.sequence or None,
        "pdb_id": validated.identifier or None,
        "synthetic": body.synthetic,
        "task_dir": str(task_dir),
    }
    task_store.create_task(task_id, {"payload": payload})

    queue = get_queue(settings.queue_name)
    job = queue.enqueue(run_annotation, task_id, payload)
    logger.info("Accepted submission %s (%s)", task_id, "pdb_id" if validated.identifier else "sequence")
    return SubmitResponse(task_id=task_id, job_id=job.id)


@app.get("/result/{task_id}")
async def get_result(task_id: str) -> Dict[str, Any]:
    """Return task status, summary, statistics and download links."""
    logger.info("Fetching result metadata for task %s", task_id)
    return results.get_result(task_id)


@app.get("/download/{task_id}/{artifact}")
async def download_artifact(task_id: str, artifact: str) -> FileResponse:
    """Download a CSV track or the JSON payload of a finished task."""

    file_path = results.artifact_path(task_id, artifact)
    return FileResponse(
        file_path,
        media_type=storage.ARTIFACT_MEDIA_TYPES[artifact],
        filename=file_path.name,
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        log_level="info",
    )
