from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Callable, List, Optional, Type, TypeVar

import uvicorn
from fastapi import Body, FastAPI, Header, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from pydantic import BaseModel
from pydantic import ValidationError as SchemaError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.schemas import DatasetCreateModel, DatasetPatchModel, InfoResponse, SnapshotCreateModel
from core import __version__
from core.auth import make_authorizer
from core.config import Settings, configure_logging
from core.datasets import DatasetService
from core.errors import DashboardError, ValidationError
from core.models import DatasetPatch
from core.seed import ensure_sample_dataset
from core.snapshots import SnapshotService
from core.store import JsonFileStore, Store

logger = logging.getLogger(__name__)

APP_NAME = "Data Visualizer"
APP_AUTHOR = "Data Visualizer maintainers"

M = TypeVar("M", bound=BaseModel)


def _ok(status_code: int = 200, **payload: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=jsonable_encoder({"ok": True, **payload}))


def _fail(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"ok": False, "message": message})


def _describe(errors: List[dict]) -> str:
    if not errors:
        return "Invalid request body"
    first = errors[0]
    where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    return f"Invalid request body: {where} {first.get('msg', '')}".strip()


def _parse(model: Type[M], payload: Any) -> Optional[M]:
    """Validate a raw body after the admin check has passed; schema errors become a 400."""
    if payload is None:
        return None
    try:
        return model.model_validate(payload)
    except SchemaError as exc:
        raise ValidationError(_describe(exc.errors())) from exc


def _guarded(name: str, fn: Callable[[], JSONResponse]) -> JSONResponse:
    """Run a handler body and turn dashboard errors into the ``{ok: false, message}`` envelope."""
    try:
        return fn()
    except DashboardError as exc:
        return _fail(exc.status_code, exc.message)
    except Exception as exc:
        logger.exception("%s failed", name)
        return _fail(500, f"{type(exc).__name__}: {exc}")


def _static_file(static_dir: Path, full_path: str) -> Optional[Path]:
    root = static_dir.resolve()
    candidate = (root / full_path).resolve()
    if full_path and candidate.is_file() and (candidate == root or root in candidate.parents):
        return candidate
    return None


def create_app(settings: Optional[Settings] = None, store: Optional[Store] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    store = store if store is not None else JsonFileStore(settings.data_file)
    authorize = make_authorizer(settings.admin_token)
    datasets = DatasetService(store, authorize)
    snapshots = SnapshotService(store, authorize)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        store.ensure_initialized()
        ensure_sample_dataset(datasets)
        if settings.uses_default_token:
            logger.warning("ADMIN_TOKEN is the insecure default; set it before any real deployment")
        logger.info("API ready on port %s", settings.port)
        yield

    app = FastAPI(title=f"{APP_NAME} API", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.datasets = datasets
    app.state.snapshots = snapshots

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_failed(_: Request, exc: RequestValidationError) -> JSONResponse:
        return _fail(400, _describe(exc.errors()))

    @app.exception_handler(StarletteHTTPException)
    async def http_failed(_: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _fail(exc.status_code, str(exc.detail))

    # ---------- datasets ----------

    @app.get("/api/datasets")
    def list_datasets():
        return _guarded("list_datasets", lambda: _ok(datasets=[d.to_dict() for d in datasets.list()]))

    @app.get("/api/datasets/{dataset_id}")
    def get_dataset(dataset_id: str):
        return _guarded("get_dataset", lambda: _ok(dataset=datasets.get(dataset_id).to_dict()))

    @app.post("/api/datasets")
    def create_dataset(body: DatasetCreateModel):
        def handler() -> JSONResponse:
            created = datasets.create(
                name=body.name,
                labels=body.labels,
                series=[s.model_dump() for s in body.series] if body.series is not None else None,
                meta=body.meta,
            )
            return _ok(dataset=created.to_dict())

        return _guarded("create_dataset", handler)

    @app.put("/api/datasets/{dataset_id}")
    def update_dataset(
        dataset_id: str,
        payload: Any = Body(default=None),
        x_admin_token: str = Header(default=""),
    ):
        def handler() -> JSONResponse:
            datasets.require_admin(x_admin_token)
            body = _parse(DatasetPatchModel, payload)
            patch = DatasetPatch.from_dict(body.model_dump(exclude_none=True) if body else None)
            return _ok(dataset=datasets.update(dataset_id, x_admin_token, patch).to_dict())

        return _guarded("update_dataset", handler)

    @app.delete("/api/datasets/{dataset_id}")
    def delete_dataset(dataset_id: str, x_admin_token: str = Header(default="")):
        return _guarded("delete_dataset", lambda: _ok(removed=datasets.delete(dataset_id, x_admin_token).to_dict()))

    # ---------- snapshots ----------

    @app.post("/api/snapshots")
    def create_snapshot(payload: Any = Body(default=None), x_admin_token: str = Header(default="")):
        def handler() -> JSONResponse:
            snapshots.require_admin(x_admin_token)
            body = _parse(SnapshotCreateModel, payload)
            name = body.name if body else None
            state = body.dashboard_state if body else None
            return _ok(snapshot=snapshots.create(x_admin_token, name, state).to_dict())

        return _guarded("create_snapshot", handler)

    @app.get("/api/snapshots")
    def list_snapshots():
        return _guarded("list_snapshots", lambda: _ok(snapshots=[s.to_dict() for s in snapshots.list()]))

    # ---------- meta / static ----------

    @app.get("/api/info")
    def info():
        return InfoResponse(app=APP_NAME, version=__version__, author=APP_AUTHOR)

    @app.get("/{full_path:path}", include_in_schema=False)
    def frontend(full_path: str):
        asset = _static_file(settings.static_dir, full_path)
        if asset is not None:
            return FileResponse(asset)
        index = settings.static_dir / "index.html"
        if index.is_file():
            return FileResponse(index)
        return _fail(404, "Frontend not found")

    return app


app = create_app()


def run() -> None:
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    uvicorn.run("api.main:app", host="0.0.0.0", port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
