from __future__ import annotations  # FastAPI server exposing live coverage sessions

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import get_manager, router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    yield
    # Live sessions own timer threads; end them before the process exits.
    logger.info("Ending live sessions on shutdown")
    get_manager().shutdown()


app = FastAPI(title="Live Coverage API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"]
)
app.include_router(router)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
