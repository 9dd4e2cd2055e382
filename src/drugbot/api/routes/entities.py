"""
Entity and child entity endpoints (generic drugs and their manufactured drugs).
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, HTTPException, Query

from drugbot.api.dependencies import ChildRepoDep, EntityRepoDep
from drugbot.exceptions import InvalidRequestError
from drugbot.models.ui_model import UIEntity, UIEntityRef

router = APIRouter()

PARENT_KEY_FIELDS = ("entityKey", "entity_key")


# ============================================================================
# Entities
# ============================================================================

@router.get("/entities", response_model=List[UIEntity])
def list_entities(repo: EntityRepoDep, search: Optional[str] = None) -> List[UIEntity]:
    if search:
        return repo.search_entities(search)
    return repo.get_all_entities()


@router.post("/entities", response_model=UIEntity, status_code=201)
def create_entity(repo: EntityRepoDep, values: Dict[str, Any] = Body(...)) -> UIEntity:
    if not values:
        raise InvalidRequestError("Entity values are required")
    return repo.create_entity(values)


@router.get("/entities/tree", response_model=List[UIEntityRef])
def entity_tree(repo: EntityRepoDep) -> List[UIEntityRef]:
    """Entity references with their children, for the navigation tree."""
    return repo.get_entity_tree_data()


@router.get("/entities/{key}", response_model=UIEntity)
def get_entity(key: str, repo: EntityRepoDep) -> UIEntity:
    entity = repo.get_entity_by_key(key)
    if entity is None:
        raise HTTPException(status_code=404, detail="Entity not found")
    return entity


@router.api_route("/entities/{key}", methods=["PUT", "PATCH"], response_model=UIEntity)
def update_entity(key: str, repo: EntityRepoDep, values: Dict[str, Any] = Body(...)) -> UIEntity:
    entity = repo.update_entity(key, values)
    if entity is None:
        raise HTTPException(status_code=404, detail="Entity not found")
    return entity


@router.delete("/entities/{key}")
def delete_entity(key: str, repo: EntityRepoDep) -> Dict[str, str]:
    if not repo.delete_entity(key):
        raise HTTPException(status_code=404, detail="Entity not found")
    return {"message": "Entity deleted successfully"}


# ============================================================================
# Child entities
# ============================================================================

@router.get("/children", response_model=List[UIEntity])
def list_children(
    repo: ChildRepoDep,
    entity_key: Optional[str] = Query(default=None, alias="entityKey"),
    search: Optional[str] = None,
) -> List[UIEntity]:
    """Children of one parent (``entityKey``), a search, or all children."""
    if entity_key:
        return repo.get_children_by_entity_key(entity_key)
    return repo.search_children(search or "")


@router.post("/children", response_model=UIEntity, status_code=201)
def create_child(repo: ChildRepoDep, payload: Dict[str, Any] = Body(...)) -> UIEntity:
    """
    Create a child under an existing parent.

    The parent is named by ``entityKey`` in the body; every other field is a
    child property value.
    """
    values = dict(payload)
    parent_key = None
    for field in PARENT_KEY_FIELDS:
        parent_key = values.pop(field, None) or parent_key
    if not parent_key:
        raise InvalidRequestError("entityKey is required")
    return repo.create_child_entity(parent_key, values)


@router.get("/children/{key}", response_model=UIEntity)
def get_child(key: str, repo: ChildRepoDep) -> UIEntity:
    child = repo.get_child_by_key(key)
    if child is None:
        raise HTTPException(status_code=404, detail="Child entity not found")
    return child


@router.api_route("/children/{key}", methods=["PUT", "PATCH"], response_model=UIEntity)
def update_child(key: str, repo: ChildRepoDep, values: Dict[str, Any] = Body(...)) -> UIEntity:
    child = repo.update_child_entity(key, values)
    if child is None:
        raise HTTPException(status_code=404, detail="Child entity not found")
    return child


@router.delete("/children/{key}")
def delete_child(key: str, repo: ChildRepoDep) -> Dict[str, str]:
    if not repo.delete_child_entity(key):
        raise HTTPException(status_code=404, detail="Child entity not found")
    return {"message": "Child entity deleted successfully"}
