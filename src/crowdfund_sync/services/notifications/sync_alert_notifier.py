# -*- coding: utf-8 -*-
"""SyncAlertNotifier: turns sync and transaction bus events into notifications."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Optional

import structlog

from crowdfund_sync.events.contributions import ContributionRecordedEvent
from crowdfund_sync.events.sync import SyncCycleFailedEvent
from crowdfund_sync.events.transactions import TransactionStatusChangedEvent
from crowdfund_sync.notifications.types import NotificationMessage
from crowdfund_sync.utils.validation import mask_address

if TYPE_CHECKING:
    from bubus import EventBus  # type: ignore[import-untyped]

    from crowdfund_sync.notifications.notification_manager import NotificationService


class SyncAlertNotifier:
    """Subscribes to bus events and sends notifications via NotificationService.

    - SyncCycleFailedEvent -> sync_failed
    - TransactionStatusChangedEvent with status failed -> transaction_failed
    - ContributionRecordedEvent -> contribution_recorded
    """

    def __init__(
        self,
        notification_service: "NotificationService",
        event_bus: Any,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        self._notification_service = notification_service
        self._event_bus: "EventBus" = event_bus
        self._logger = get_logger(logger_name or self.__class__.__name__)

    def _subscriptions(self) -> list[tuple[type, Callable[[Any], None]]]:
        return [
            (SyncCycleFailedEvent, self._on_sync_failed),
            (TransactionStatusChangedEvent, self._on_transaction_status),
            (ContributionRecordedEvent, self._on_contribution_recorded),
        ]

    def start(self) -> None:
        """Subscribe to the bus events."""
        for event_type, handler in self._subscriptions():
            self._event_bus.on(event_type, handler)
        self._logger.debug("sync_alert_notifier_started")

    def stop(self) -> None:
        """Unsubscribe from the bus events."""
        handlers = getattr(self._event_bus, "handlers", {})
        for event_type, handler in self._subscriptions():
            key = event_type.__name__
            if key in handlers:
                handlers[key] = [h for h in handlers[key] if h != handler]
        self._logger.debug("sync_alert_notifier_stopped")

    def _on_sync_failed(self, event: SyncCycleFailedEvent) -> None:
        self._notification_service.notify(
            NotificationMessage(
                event_type="sync_failed",
                title="Ledger sync failed",
                message=f"{event.operation} failed: {event.error_message}",
                payload={
                    "operation": event.operation,
                    "error_type": event.error_type,
                    "last_synced_block": event.last_synced_block,
                    "failed_at": event.failed_at.isoformat(),
                },
            )
        )
        self._logger.debug("sync_failed_notified", sync_operation=event.operation)

    def _on_transaction_status(self, event: TransactionStatusChangedEvent) -> None:
        if event.status != "failed":
            return
        payload: dict[str, Any] = {
            "tx_id": event.tx_id,
            "kind": event.kind,
            "initiator": mask_address(event.initiator),
        }
        if event.subject_project_id is not None:
            payload["project_id"] = str(event.subject_project_id)
        self._notification_service.notify(
            NotificationMessage(
                event_type="transaction_failed",
                title="Transaction failed",
                message=event.error_message or "Transaction failed",
                payload=payload,
            )
        )
        self._logger.debug("transaction_failed_notified", tx_id=event.tx_id)

    def _on_contribution_recorded(self, event: ContributionRecordedEvent) -> None:
        self._notification_service.notify(
            NotificationMessage(
                event_type="contribution_recorded",
                message=f"Contribution of {event.amount} recorded",
                payload={
                    "tx_id": event.tx_id,
                    "project_id": str(event.project_id),
                    "contributor": mask_address(event.contributor_address),
                    "total_raised": event.total_raised,
                    "contributor_count": event.contributor_count,
                    "project_status": event.project_status,
                },
            )
        )
