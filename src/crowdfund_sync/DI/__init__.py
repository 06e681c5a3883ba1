"""Dependency injection."""

from crowdfund_sync.DI.container import Container

__all__ = ["Container"]
