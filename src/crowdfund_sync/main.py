# -*- coding: utf-8 -*-
"""
Service entry point: runs the scheduled ledger sync until SIGINT/SIGTERM.

The request-time path (confirm, track, record) is exposed through
container.sync_gateway(); this process only hosts the background pieces.

Run with: python -m crowdfund_sync.main
"""
from __future__ import annotations

import asyncio
import signal
import structlog
from typing import Any

from crowdfund_sync.DI import Container
from crowdfund_sync.config import Settings, get_settings
from crowdfund_sync.exceptions import MissingRequiredConfigError
from crowdfund_sync.logging.config import configure_logging
from crowdfund_sync.notifications.types import NotificationMessage


def _check_settings(settings: Settings, logger: Any) -> None:
    if not settings.ledger.api_host.strip():
        logger.error("main_missing_ledger_api_host")
        raise MissingRequiredConfigError("LEDGER__API_HOST")
    if settings.sync.enabled and not settings.ledger.events_url:
        logger.warning("main_event_feed_not_configured", sync_enabled=True)


def _stop_on_signals(stop: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            return  # no loop signal handlers on Windows


async def run() -> None:
    configure_logging()
    logger = structlog.get_logger("main")
    settings = get_settings()
    _check_settings(settings, logger)

    container = Container()
    alerts = container.notification_service()
    alert_notifier = container.sync_alert_notifier()
    engine = container.sync_engine()

    await alerts.initialize()
    alert_notifier.start()
    stop = asyncio.Event()
    _stop_on_signals(stop)

    logger.info(
        "main_started",
        sync_enabled=settings.sync.enabled,
        sync_poll_interval_seconds=settings.sync.poll_interval_seconds,
        ledger_api_host=settings.ledger.api_host,
    )
    alerts.notify(
        NotificationMessage(
            event_type="system_started",
            message="Crowdfund sync service started",
            payload={"sync_enabled": settings.sync.enabled},
        )
    )
    try:
        if settings.sync.enabled:
            await engine.start()
        await stop.wait()
    finally:
        await engine.stop()
        await container.transaction_tracker().aclose()
        await container.ledger_client().aclose()
        alert_notifier.stop()
        alerts.notify(NotificationMessage(event_type="system_stopped", message="Crowdfund sync service stopped"))
        await alerts.shutdown()
        logger.info("main_shutdown_complete")


def main() -> None:
    asyncio.run(run())


__all__ = ["run", "main"]

if __name__ == "__main__":
    main()
