"""Operations exposed to the HTTP layer."""

from crowdfund_sync.gateway.sync_gateway import SyncGateway

__all__ = ["SyncGateway"]
