"""FastAPI application entrypoint. No business logic; only wiring, middleware and startup seeding."""

from contextlib import asynccontextmanager

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import router as api_router
from app.core.config import settings
from app.core.database import SessionLocal, engine
from app.core.session import SessionRenewalMiddleware
from app.services.bootstrap import run_bootstrap
from app.web.dashboard import router as web_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Ensure schema, default roles and the seed admin before serving."""
    db = SessionLocal()
    try:
        run_bootstrap(db, settings, engine=engine)
    finally:
        db.close()
    yield


app = FastAPI(
    title="MultilingualCRUD API",
    version="0.1.0",
    description="A multilingual CRUD API with JWT authentication, user and role management",
    docs_url="/swagger",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(SessionRenewalMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.APP_ENV == "dev" else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix=settings.API_PREFIX)
app.include_router(web_router)
