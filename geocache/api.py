"""
GeoCache HTTP API.

Stands in for the host platform's invocation layer: every request becomes
one contract invocation with its own TransactionContext. The caller's raw
identity arrives in the X-Caller-Id / X-Caller-Name headers and is trusted
as authentic.
"""

import logging
from typing import Optional

from fastapi import Depends, FastAPI, Header, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from . import __version__, config
from .api_models import (
    CreateCacheRequest,
    PositionRequest,
    ReportRequest,
    TrackableRequest,
    UpdateCacheRequest,
    UpdateCoordinatesRequest,
    VisitRequest,
)
from .context import TransactionContext
from .contract import GeoCacheContract
from .errors import GeoCacheError, ValidationError
from .logging_config import configure_logging, get_invocation_id, set_invocation_id
from .models import User
from .service import GeoCacheService
from .store import StateStore

logger = logging.getLogger(__name__)

app = FastAPI(title="GeoCache Registry", version=__version__)

contract = GeoCacheContract()
service = GeoCacheService(contract)


@app.on_event("startup")
def _startup():
    configure_logging(level=config.log_level(), json_format=config.LOG_JSON)
    problems = [name for name, ok in config.validate_config().items() if not ok]
    if problems:
        logger.warning("configuration checks failed: %s", ", ".join(problems))


@app.middleware("http")
async def invocation_id_middleware(request: Request, call_next):
    """Bind X-Invocation-Id (or a fresh id) to the request's logging context."""
    invocation_id = set_invocation_id(request.headers.get("x-invocation-id"))
    response = await call_next(request)
    response.headers["X-Invocation-Id"] = invocation_id
    return response


# ============================================================
# Dependencies
# ============================================================

def get_state_store() -> StateStore:
    return config.get_store()


def get_context(store: StateStore = Depends(get_state_store)) -> TransactionContext:
    invocation_id = get_invocation_id()
    return TransactionContext(
        store=store,
        random=config.get_random_source(invocation_id),
        invocation_id=invocation_id
    )


def get_caller(
    x_caller_id: Optional[str] = Header(default=None),
    x_caller_name: str = Header(default="")
) -> User:
    if not x_caller_id:
        raise ValidationError("X-Caller-Id", "caller identity header is required")
    return User(id=x_caller_id, name=x_caller_name)


# ============================================================
# Error Handlers
# ============================================================

@app.exception_handler(GeoCacheError)
async def geocache_error_handler(request: Request, exc: GeoCacheError):
    logger.info(
        f"{exc.code}: {exc.message}",
        extra={"error_code": exc.code, "path": request.url.path},
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    fields = [".".join(str(p) for p in err.get("loc", [])) for err in exc.errors()]
    return JSONResponse(
        status_code=400,
        content={
            "error": ValidationError.code,
            "message": f"Invalid request fields: {', '.join(fields)}",
            "key": request.path_params.get("key"),
        },
    )


# ============================================================
# Routes
# ============================================================

@app.get("/health")
def health():
    return {"status": "ok", "env": config.ENV, "config": config.validate_config()}


@app.get("/caches/{key}/exists")
def cache_exists(key: str, ctx: TransactionContext = Depends(get_context)):
    return {"key": key, "exists": contract.exists(ctx, key)}


@app.post("/caches/{key}", status_code=201)
def create_cache(
    key: str,
    req: CreateCacheRequest,
    caller: User = Depends(get_caller),
    ctx: TransactionContext = Depends(get_context)
):
    contract.create(
        ctx, caller, key, req.name, req.description,
        req.x_coord_range, req.y_coord_range, req.trackable_value
    )
    return contract.read(ctx, key).model_dump(mode="json")


@app.get("/caches/{key}")
def read_cache(key: str, ctx: TransactionContext = Depends(get_context)):
    return contract.read(ctx, key).model_dump(mode="json")


@app.patch("/caches/{key}")
def update_cache(
    key: str,
    req: UpdateCacheRequest,
    caller: User = Depends(get_caller),
    ctx: TransactionContext = Depends(get_context)
):
    contract.update_descriptive(ctx, caller, key, req.name, req.description)
    return contract.read(ctx, key).model_dump(mode="json")


@app.put("/caches/{key}/coordinates")
def update_coordinates(
    key: str,
    req: UpdateCoordinatesRequest,
    caller: User = Depends(get_caller),
    ctx: TransactionContext = Depends(get_context)
):
    contract.update_coordinates(ctx, caller, key, req.x_coord_range, req.y_coord_range)
    return contract.read(ctx, key).model_dump(mode="json")


@app.post("/caches/{key}/visitors")
def add_visitor(
    key: str,
    req: PositionRequest,
    caller: User = Depends(get_caller),
    ctx: TransactionContext = Depends(get_context)
):
    contract.add_visitor(ctx, caller, key, req.x, req.y)
    return {"key": key, "status": "VISITED"}


@app.post("/caches/{key}/trackable")
def switch_trackable(
    key: str,
    req: TrackableRequest,
    ctx: TransactionContext = Depends(get_context)
):
    previous = contract.switch_trackable(ctx, req.to_trackable(), key)
    return previous.model_dump(mode="json")


@app.post("/caches/{key}/visits")
def log_visit(
    key: str,
    req: VisitRequest,
    caller: User = Depends(get_caller),
    ctx: TransactionContext = Depends(get_context)
):
    previous = service.log_visit(ctx, caller, key, req.x, req.y, req.trackable.to_trackable())
    return previous.model_dump(mode="json")


@app.delete("/caches/{key}", status_code=204)
def delete_cache(
    key: str,
    caller: User = Depends(get_caller),
    ctx: TransactionContext = Depends(get_context)
):
    contract.delete(ctx, caller, key)
    return Response(status_code=204)


@app.post("/caches/{key}/reports", status_code=201)
def report_cache(
    key: str,
    req: ReportRequest,
    caller: User = Depends(get_caller),
    ctx: TransactionContext = Depends(get_context)
):
    contract.report(ctx, caller, req.message, key)
    return {"key": key, "status": "REPORTED"}


@app.get("/caches/{key}/reports")
def get_reports(
    key: str,
    caller: User = Depends(get_caller),
    ctx: TransactionContext = Depends(get_context)
):
    reports = contract.get_reports(ctx, caller, key)
    return [r.model_dump(mode="json") for r in reports]
