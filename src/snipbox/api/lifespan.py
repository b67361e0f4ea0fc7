from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    store = app.state.store
    await store.ensure_ready()
    logger.info("snippet store ready (%s)", type(store).__name__)
    yield
    await store.dispose()
