"""
DrugBot: drug database service.

Maps drug records between their PostgreSQL tables and the UI model, serves
them over a FastAPI backend (dynamic tables, entities, saved reports,
Excel export) and ships Python clients for the paged report endpoints.
"""

__version__ = "1.0.0"
