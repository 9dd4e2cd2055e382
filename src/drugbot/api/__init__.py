"""
HTTP API for the DrugBot database.
"""
