from .app import LogflowDashboard

__all__ = ["LogflowDashboard"]
