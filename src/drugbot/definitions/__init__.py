"""
Static DrugBot model instances: the model map, the UI model and the DB schema.
"""
from drugbot.definitions.model_map import THE_MODEL_MAP
from drugbot.definitions.ui_model import THE_UI_MODEL
from drugbot.definitions.db_model import THE_DB_MODEL

__all__ = ["THE_MODEL_MAP", "THE_UI_MODEL", "THE_DB_MODEL"]
