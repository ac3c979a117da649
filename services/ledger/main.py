from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import ALLOWED_ORIGINS
from database import close_db_connections, init_db
from logging_config import get_logger

from api.endpoints.garden import router as garden_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("growth_ledger_started")
    yield
    close_db_connections()
    logger.info("growth_ledger_stopped")


app = FastAPI(title="Growth Ledger", lifespan=lifespan)

# SECURITY: Limit CORS to specific origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.include_router(garden_router)


@app.get("/health")
def health():
    return {"status": "ok"}
