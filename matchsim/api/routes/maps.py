from fastapi import APIRouter, HTTPException, Query
from typing import List

from ...schemas.maps import MapResponse, MapDetailResponse, MapTacticalInfo, ChokePointResponse
from ...services.map_catalog import MapCatalog, MapLayout, MapNotFound

router = APIRouter()

catalog = MapCatalog()


def _map_fields(layout: MapLayout) -> dict:
    return {
        "id": layout.id,
        "name": layout.name,
        "display_name": layout.display_name,
        "theme": layout.theme,
        "description": layout.description,
        "bomb_sites": list(layout.bomb_sites),
        "choke_points": [
            ChokePointResponse(x=c.x, y=c.y, radius=c.radius) for c in layout.choke_points
        ],
        "tactical_notes": list(layout.tactical_notes),
        "enabled": layout.enabled,
    }


@router.get("/", response_model=List[MapResponse])
async def list_maps(enabled_only: bool = Query(True)):
    """List the map pool."""
    maps = sorted(catalog.list_maps(enabled_only=enabled_only), key=lambda m: m.display_name)
    return [MapResponse(**_map_fields(m)) for m in maps]


@router.get("/{map_name}", response_model=MapDetailResponse)
async def get_map(map_name: str):
    """Get a map with its tactical summary."""
    try:
        layout = catalog.get_map(map_name)
    except MapNotFound:
        raise HTTPException(status_code=404, detail="Map not found")
    return MapDetailResponse(
        **_map_fields(layout),
        tactical_info=MapTacticalInfo(**MapCatalog.tactical_info(layout)),
    )
