"""
API routers, mounted under ``/api`` by drugbot.api.main.
"""
from drugbot.api.routes import dynamic, entities, export, reports, select_lists, upload

__all__ = ["dynamic", "entities", "export", "reports", "select_lists", "upload"]
