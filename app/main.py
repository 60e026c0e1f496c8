import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from .api import api_router
from .config import get_settings
from .db import SessionLocal, dispose_db, init_db
from .services.ledger import LedgerStore
from .telegram.bot import init_bot, shutdown_bot

settings = get_settings()
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    app.state.ledger = LedgerStore(SessionLocal)
    await init_bot(app.state.ledger)
    try:
        yield
    finally:
        await shutdown_bot()
        await dispose_db()


_docs_enabled = settings.environment.lower() != "production"
app = FastAPI(
    title=settings.app_name,
    lifespan=lifespan,
    docs_url="/docs" if _docs_enabled else None,
    redoc_url="/redoc" if _docs_enabled else None,
)
app.include_router(api_router, prefix="/api")


@app.get("/", response_class=PlainTextResponse, include_in_schema=False)
async def index() -> str:
    return "Money Buddy bot is running"


@app.get("/health", tags=["system"])
@app.get("/healthz", tags=["system"], include_in_schema=False)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}
