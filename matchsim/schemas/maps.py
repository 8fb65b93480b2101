from pydantic import BaseModel
from typing import List, Dict


class ChokePointResponse(BaseModel):
    x: float
    y: float
    radius: float


class MapResponse(BaseModel):
    id: int
    name: str
    display_name: str
    theme: str = ""
    description: str = ""
    bomb_sites: List[str]
    choke_points: List[ChokePointResponse] = []
    tactical_notes: List[str] = []
    enabled: bool = True


class MapTacticalInfo(BaseModel):
    choke_points: int
    bomb_sites: int
    tactical_complexity: int
    recommended_composition: Dict[str, int]


class MapDetailResponse(MapResponse):
    tactical_info: MapTacticalInfo
