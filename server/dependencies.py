"""
FastAPI dependencies resolving the services attached to the app.

create_app() stores the catalog, player registry and session manager on
app.state; routers receive them through Depends instead of module globals.
"""

from fastapi import Request

from catalog import CardCatalog
from players import PlayerRegistry
from session import SessionManager


def get_catalog(request: Request) -> CardCatalog:
    return request.app.state.catalog


def get_registry(request: Request) -> PlayerRegistry:
    return request.app.state.registry


def get_sessions(request: Request) -> SessionManager:
    return request.app.state.sessions
