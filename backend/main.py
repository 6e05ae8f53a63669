import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core import config
from routers import audio, general  # pyright: ignore[reportImplicitRelativeImport]

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown."""
    logger.info("Application startup (defaults: %s)", config.default_options().model_dump())
    yield
    logger.info("Application shutdown")


EXPOSED_HEADERS = [
    "Content-Disposition",
    "X-Desilence-Original-Duration",
    "X-Desilence-Processed-Duration",
    "X-Desilence-Chunks",
    "X-Desilence-Percent-Saved",
]

app = FastAPI(lifespan=lifespan)

api = APIRouter(prefix="/api")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=EXPOSED_HEADERS,
)

api.include_router(general.router)
api.include_router(audio.router)
app.include_router(api)
