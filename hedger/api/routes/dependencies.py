"""
Route dependencies shared by the API routers.
"""

from fastapi import Request

from ...dashboard import Dashboard


def get_dashboard(request: Request) -> Dashboard:
    """The Dashboard instance attached to the running app."""
    return request.app.state.dashboard
