"""
Pack browsing API router.
"""

from fastapi import APIRouter, Depends

from catalog import CardCatalog
from dependencies import get_catalog
from errors import PackNotFoundError
from views import pack_summary, pack_to_dict

router = APIRouter(prefix="/packs", tags=["packs"])


@router.get("")
async def list_packs(catalog: CardCatalog = Depends(get_catalog)):
    """List every pack with its card counts."""
    return {"packs": [pack_summary(pack) for pack in catalog.get_all_packs()]}


@router.get("/{pack_id}")
async def get_pack(pack_id: int, catalog: CardCatalog = Depends(get_catalog)):
    """Get a pack with all of its cards."""
    pack = catalog.get_pack(pack_id)
    if pack is None:
        raise PackNotFoundError(f"invalid pack id {pack_id}")
    return pack_to_dict(pack)
