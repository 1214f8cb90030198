from __future__ import annotations

import logging
from fastapi import FastAPI

from sparkvibe.core.container import Services

log = logging.getLogger("sparkvibe.core")


def _startup_health(services: Services) -> None:
    """
    Best-effort "are the basics alive" checks.
    Never raises; logs warnings so the app still boots in dev.
    """
    try:
        if not services.store.ping():
            log.warning("progress store not reachable (ledger writes will return 503)")
    except Exception as e:
        log.warning("progress store ping error: %s", e)

    if services.llm is None:
        log.warning("OPENAI_API_KEY not set; capsules come from the static tables")
    if not services.push.enabled:
        log.warning("VAPID keys not set; push notifications disabled")


def register_lifecycle(app: FastAPI, services: Services) -> None:
    """
    Registers startup/shutdown hooks on the FastAPI app.
    """
    settings = services.settings

    @app.on_event("startup")
    async def _on_startup() -> None:  # noqa: D401
        log.info("starting %s (env=%s)", settings.APP_NAME, settings.ENV)
        _startup_health(services)

    @app.on_event("shutdown")
    async def _on_shutdown() -> None:  # noqa: D401
        log.info("shutting down %s", settings.APP_NAME)
