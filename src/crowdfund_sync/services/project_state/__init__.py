"""Project status maintenance."""

from crowdfund_sync.services.project_state.project_state_updater import ProjectStateUpdater

__all__ = ["ProjectStateUpdater"]
