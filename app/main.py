from contextlib import asynccontextmanager

from fastapi import FastAPI
from app.core.config import settings
from app.core.logging_config import configure_logging
from app.db.mongo import connect_to_mongo, close_mongo_connection
from app.api.v1.api import api_router
from app.repositories.user_cache import UserCache

configure_logging()

@asynccontextmanager
async def lifespan(app: FastAPI):
    await connect_to_mongo()
    yield
    await close_mongo_connection()

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.PROJECT_VERSION,
    description=settings.DESCRIPTION,
    lifespan=lifespan
)
app.state.user_cache = UserCache(settings.USER_CACHE_TTL_SECONDS)

@app.get("/")
async def root():
    return {"message": "Welcome to Balance API"}

app.include_router(api_router, prefix=settings.API_V1_STR)
