"""Map catalog - single source of truth for map layouts.

Only the shape of a map matters to the simulation (bomb-site count and
choke-point count drive the ideal composition); the remaining fields are
display data for the client.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Iterable
import random

from .team_strength import TeamComposition, ideal_composition


class MapNotFound(Exception):
    """Raised when a map name is not in the catalog."""

    def __init__(self, name: str):
        super().__init__(f"Map {name} not found")
        self.name = name


@dataclass(frozen=True)
class ChokePoint:
    x: float
    y: float
    radius: float


@dataclass(frozen=True)
class MapLayout:
    """Static map layout."""
    id: int
    name: str
    display_name: str
    theme: str = ""
    description: str = ""
    bomb_sites: Tuple[str, ...] = ("A", "B")
    choke_points: Tuple[ChokePoint, ...] = ()
    tactical_notes: Tuple[str, ...] = ()
    enabled: bool = True


DEFAULT_MAPS: List[MapLayout] = [
    MapLayout(
        id=1,
        name="ascent",
        display_name="Ascent",
        theme="Italian coastal town",
        description="A two-site map with an open middle area and vertical gameplay elements",
        bomb_sites=("A", "B"),
        choke_points=(ChokePoint(350, 200, 30), ChokePoint(450, 300, 25), ChokePoint(200, 150, 20)),
        tactical_notes=(
            "Control mid early for map control",
            "A site has multiple angles to clear",
            "B site can be smoked off easily",
            "Catwalk provides elevation advantage",
        ),
    ),
    MapLayout(
        id=2,
        name="bind",
        display_name="Bind",
        theme="Moroccan city",
        description="Unique two-site map with teleporters and no middle area",
        bomb_sites=("A", "B"),
        choke_points=(ChokePoint(400, 200, 25), ChokePoint(250, 100, 20), ChokePoint(600, 350, 25)),
        tactical_notes=(
            "No traditional mid area - use teleporters",
            "A site has tight angles",
            "B site allows for long-range duels",
            "Hookah is key connector between sites",
        ),
    ),
    MapLayout(
        id=3,
        name="haven",
        display_name="Haven",
        theme="Bhutanese monastery",
        description="Three-site map with unique strategic considerations",
        bomb_sites=("A", "B", "C"),
        choke_points=(ChokePoint(300, 280, 30), ChokePoint(200, 100, 25), ChokePoint(700, 300, 25)),
        tactical_notes=(
            "Three sites require careful resource allocation",
            "Mid control is crucial for rotations",
            "Defenders must choose positioning carefully",
            "Attackers can split across multiple sites",
        ),
    ),
    MapLayout(
        id=4,
        name="split",
        display_name="Split",
        theme="Japanese urban environment",
        description="Vertical map with elevated positions and rope climbs",
        bomb_sites=("A", "B"),
        choke_points=(ChokePoint(400, 150, 25), ChokePoint(350, 300, 30), ChokePoint(200, 150, 20)),
        tactical_notes=(
            "Vertical gameplay with rope climbs",
            "Mid control allows access to both sites",
            "Sewers provide flanking opportunities",
            "Heaven position offers map control",
        ),
    ),
    MapLayout(
        id=5,
        name="icebox",
        display_name="Icebox",
        theme="Arctic research facility",
        description="Vertical map with zip lines and multiple elevation levels",
        bomb_sites=("A", "B"),
        choke_points=(ChokePoint(350, 200, 25), ChokePoint(450, 280, 30), ChokePoint(250, 100, 20)),
        tactical_notes=(
            "Zip lines provide quick rotations",
            "Multiple elevation levels",
            "Kitchen area controls mid access",
            "Nest position offers powerful angles",
        ),
    ),
]


class MapCatalog:
    """Lookup and random selection over the map pool."""

    def __init__(self, maps: Optional[Iterable[MapLayout]] = None):
        self._maps: Dict[str, MapLayout] = {
            m.name.lower(): m for m in (DEFAULT_MAPS if maps is None else maps)
        }

    def list_maps(self, enabled_only: bool = True) -> List[MapLayout]:
        return [m for m in self._maps.values() if m.enabled or not enabled_only]

    def get_map(self, name: str) -> MapLayout:
        layout = self._maps.get(name.lower())
        if layout is None:
            raise MapNotFound(name)
        return layout

    def random_map(self, rng: random.Random) -> MapLayout:
        """Uniform pick from the enabled pool."""
        pool = self.list_maps(enabled_only=True)
        if not pool:
            raise MapNotFound("<enabled pool>")
        return rng.choice(pool)

    @staticmethod
    def recommended_composition(map_layout: MapLayout) -> TeamComposition:
        return ideal_composition(map_layout)

    @classmethod
    def tactical_info(cls, map_layout: MapLayout) -> Dict[str, object]:
        return {
            "choke_points": len(map_layout.choke_points),
            "bomb_sites": len(map_layout.bomb_sites),
            "tactical_complexity": len(map_layout.tactical_notes),
            "recommended_composition": cls.recommended_composition(map_layout).as_dict(),
        }
