from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core import db, settings
from core.observability import setup_logging
from search import router as search_router


@asynccontextmanager
async def lifespan(_: FastAPI):
    setup_logging(settings.log_level(), settings.log_format())
    # The search engine's DB pool lives for the whole process.
    await db.init_pool()
    try:
        yield
    finally:
        await db.close_pool()


app = FastAPI(lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins(),
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)

app.include_router(search_router.router, tags=["search"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "search query api"}
