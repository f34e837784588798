from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import sessionmaker
import logging

from fieldbook import config
from fieldbook.api.routers import (
    auth,
    beneficiaries,
    communities,
    export,
    report,
    trainings,
    villages,
    visits,
    workers,
)
from fieldbook.db import init_db, make_engine, make_session_factory
from fieldbook.errors import FieldbookError

logger = logging.getLogger(__name__)


def create_app(session_factory: sessionmaker | None = None) -> FastAPI:
    logging.basicConfig(level=config.LOG_LEVEL)

    app = FastAPI(title="ECH Fieldbook API", version="0.1.0")
    # 注入が無ければ既定の DB を使う
    app.state.session_factory = session_factory or make_session_factory(make_engine())

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(FieldbookError)
    async def fieldbook_error_handler(request: Request, exc: FieldbookError):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.get("/health")
    def health():
        return {"ok": True}

    # 初回起動時にDBスキーマを作成
    @app.on_event("startup")
    def on_startup():
        init_db(app.state.session_factory.kw["bind"])
        if config.ADMIN_PASSWORD == config.PUBLIC_ADMIN_PASSWORD:
            logger.warning("admin password is the public default; set FIELDBOOK_ADMIN_PASSWORD")

    app.include_router(auth.router,          prefix="/auth",          tags=["auth"])
    app.include_router(workers.router,       prefix="/workers",       tags=["workers"])
    app.include_router(communities.router,   prefix="/communities",   tags=["communities"])
    app.include_router(villages.router,      prefix="/villages",      tags=["villages"])
    app.include_router(beneficiaries.router, prefix="/beneficiaries", tags=["beneficiaries"])
    app.include_router(trainings.router,     prefix="/trainings",     tags=["trainings"])
    app.include_router(visits.router,        prefix="/visits",        tags=["visits"])
    app.include_router(report.router,        prefix="/report",        tags=["report"])
    app.include_router(export.router,        prefix="/export",        tags=["export"])
    return app


app = create_app()
