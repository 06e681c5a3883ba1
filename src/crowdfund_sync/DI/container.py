# -*- coding: utf-8 -*-
"""Dependency injection container (dependency-injector)."""

from __future__ import annotations

from dependency_injector import containers, providers

from crowdfund_sync.clients.http import AsyncHttpClient
from crowdfund_sync.clients.ledger import LedgerClient
from crowdfund_sync.config import Settings, get_settings
from crowdfund_sync.events.bus import get_event_bus
from crowdfund_sync.gateway import SyncGateway
from crowdfund_sync.notifications.notification_manager import NotificationService
from crowdfund_sync.notifications.strategies.base import BaseNotificationStrategy
from crowdfund_sync.notifications.strategies.console import ConsoleNotifier
from crowdfund_sync.persistence.repositories.in_memory import (
    InMemoryContributionRepository,
    InMemoryProjectRepository,
    InMemorySyncCursorRepository,
    InMemoryTransactionRepository,
    InMemoryUserRepository,
)
from crowdfund_sync.services.contribution import (
    ContributionConfirmationService,
    ContributionRecorder,
)
from crowdfund_sync.services.notifications import SyncAlertNotifier
from crowdfund_sync.services.project_state import ProjectStateUpdater
from crowdfund_sync.services.sync import SyncEngine
from crowdfund_sync.services.transaction_tracker import TransactionTracker


def _build_notification_notifiers(settings: Settings) -> list[BaseNotificationStrategy]:
    notifiers: list[BaseNotificationStrategy] = []
    if settings.console.enabled:
        notifiers.append(ConsoleNotifier(settings=settings))
    return notifiers


class Container(containers.DeclarativeContainer):
    """Application container. Wires settings, ledger client, repositories, tracker, recorder and sync engine."""

    config = providers.Callable(get_settings)

    http_client = providers.Singleton(
        AsyncHttpClient,
        settings=config,
    )

    ledger_client = providers.Singleton(
        LedgerClient,
        http_client=http_client,
        settings=config,
    )

    event_bus = providers.Callable(get_event_bus)

    notification_service = providers.Singleton(
        NotificationService,
        notifiers=providers.Callable(_build_notification_notifiers, config),
    )

    sync_alert_notifier = providers.Singleton(
        SyncAlertNotifier,
        notification_service=notification_service,
        event_bus=event_bus,
    )

    transaction_repository = providers.Singleton(InMemoryTransactionRepository)

    project_repository = providers.Singleton(InMemoryProjectRepository)

    contribution_repository = providers.Singleton(
        InMemoryContributionRepository,
        project_repository=project_repository,
    )

    sync_cursor_repository = providers.Singleton(InMemorySyncCursorRepository)

    user_repository = providers.Singleton(InMemoryUserRepository)

    transaction_tracker = providers.Singleton(
        TransactionTracker,
        ledger=ledger_client,
        transaction_repository=transaction_repository,
        settings=config,
        event_bus=event_bus,
    )

    contribution_recorder = providers.Singleton(
        ContributionRecorder,
        contribution_repository=contribution_repository,
        project_repository=project_repository,
        user_repository=user_repository,
        event_bus=event_bus,
    )

    contribution_confirmation = providers.Singleton(
        ContributionConfirmationService,
        tracker=transaction_tracker,
        recorder=contribution_recorder,
    )

    project_state_updater = providers.Singleton(
        ProjectStateUpdater,
        project_repository=project_repository,
        user_repository=user_repository,
        settings=config,
    )

    sync_engine = providers.Singleton(
        SyncEngine,
        ledger=ledger_client,
        recorder=contribution_recorder,
        project_state=project_state_updater,
        project_repository=project_repository,
        cursor_repository=sync_cursor_repository,
        settings=config,
        event_bus=event_bus,
    )

    sync_gateway = providers.Singleton(
        SyncGateway,
        tracker=transaction_tracker,
        recorder=contribution_recorder,
        confirmation=contribution_confirmation,
        sync_engine=sync_engine,
        project_state=project_state_updater,
    )
