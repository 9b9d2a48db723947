"""
helpline.api.deps — FastAPI dependency injection
=================================================
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy import Engine

from helpline.config import HelplineConfig, load_config
from helpline.database.engine import create_db_engine
from helpline.services.dashboard_service import DashboardSnapshot, build_snapshot
from helpline.services.identity_service import IdentityResolver


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return create_db_engine()


@lru_cache(maxsize=1)
def get_config() -> HelplineConfig:
    return load_config()


async def get_resolver(
    cfg: Annotated[HelplineConfig, Depends(get_config)],
    engine: Annotated[Engine, Depends(get_engine)],
) -> AsyncIterator[IdentityResolver]:
    """One resolver (and its HTTP clients) per request."""
    resolver = IdentityResolver(cfg, engine)
    try:
        yield resolver
    finally:
        await resolver.aclose()


async def get_snapshot(
    engine: Annotated[Engine, Depends(get_engine)],
    resolver: Annotated[IdentityResolver, Depends(get_resolver)],
) -> DashboardSnapshot:
    return await build_snapshot(engine, resolver)
