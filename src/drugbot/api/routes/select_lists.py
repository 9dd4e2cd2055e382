"""
Select list endpoints. Lists are shared, but every route still needs the
caller's user id (``X-User-Id``).
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from drugbot.api.dependencies import SelectListRepoDep, get_current_user
from drugbot.api.schemas import SelectListCreateRequest, SelectListItem, SelectListUpdateRequest

router = APIRouter(prefix="/select-lists", dependencies=[Depends(get_current_user)])


def _item_dicts(items: Optional[List[SelectListItem]]) -> Optional[List[Dict[str, Any]]]:
    return None if items is None else [item.model_dump() for item in items]


@router.get("")
def list_select_lists(repo: SelectListRepoDep) -> Dict[str, Any]:
    return {"selectLists": repo.list_select_lists()}


@router.post("")
def create_select_list(request: SelectListCreateRequest, repo: SelectListRepoDep) -> Dict[str, Any]:
    select_list = repo.create_select_list(request.name, request.display_name, _item_dicts(request.items))
    return {"selectList": select_list}


@router.put("")
def update_select_list(request: SelectListUpdateRequest, repo: SelectListRepoDep) -> Dict[str, Any]:
    changes = {
        "name": request.name,
        "display_name": request.display_name,
        "items": _item_dicts(request.items),
    }
    select_list = repo.update_select_list(request.uid, changes)
    if select_list is None:
        raise HTTPException(status_code=404, detail="Select list not found")
    return {"selectList": select_list}


@router.delete("")
def delete_select_list(repo: SelectListRepoDep, uid: Optional[str] = Query(default=None)) -> Dict[str, Any]:
    """Deleting a uid that no longer exists still succeeds."""
    repo.delete_select_list(uid)
    return {"success": True}
