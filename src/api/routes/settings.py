"""
Shop settings routes.

The settings live in process memory. A POST replaces them wholesale;
an invalid body is rejected and the previous settings keep being served.
"""

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from api.errors import to_http_exception
from services.settings_store import SettingsStore, get_settings_store
from shop.errors import InvalidSettings


router = APIRouter(prefix="/api/settings", tags=["Settings"])


@router.get("", summary="Current tiers and sector weighting")
async def read_settings(
    store: SettingsStore = Depends(get_settings_store),
) -> Dict[str, Any]:
    return store.as_dict()


@router.post("", summary="Replace the settings")
async def replace_settings(
    payload: Any = Body(...),
    store: SettingsStore = Depends(get_settings_store),
) -> Dict[str, bool]:
    """
    Replace tiers and sectors in one write. Last write wins.
    """
    try:
        store.replace(payload)
    except InvalidSettings as e:
        raise to_http_exception(e)
    return {"ok": True}
