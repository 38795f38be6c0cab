import asyncio
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import yaml

from stop_board.board_engine.control_layer.state import Stop, StopGroup

logger = logging.getLogger(__name__)

DEFAULT_FETCH_DELAY = 0.5

DEMO_STOPS = [
    {"id": 1, "name": "Welcome", "roomNr": "A1", "description": "Welcome desk", "divisionIds": [], "stopGroupIds": [1]},
    {"id": 2, "name": "Library", "roomNr": "B1", "description": "Library tour", "divisionIds": [], "stopGroupIds": [1]},
    {"id": 3, "name": "Workshop", "roomNr": "C1", "description": "Hands on", "divisionIds": [], "stopGroupIds": []},
    {"id": 4, "name": "Cafeteria", "roomNr": "D1", "description": "Snacks", "divisionIds": [], "stopGroupIds": []},
]

DEMO_GROUPS = [
    {"id": 1, "name": "Information", "description": "General information", "isPublic": True, "stopIds": [1, 2]},
    {"id": 2, "name": "Tours", "description": "Guided tours", "isPublic": False, "stopIds": []},
]


@dataclass
class SeedData:
    stops: List[Stop] = field(default_factory=list)
    groups: List[StopGroup] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "SeedData":
        return cls(
            stops=[Stop.model_validate(s) for s in data.get("stops", [])],
            groups=[StopGroup.model_validate(g) for g in data.get("groups", [])],
        )


def load_seed_file(path: str | Path) -> SeedData:
    seed_path = Path(path)
    with seed_path.open("r", encoding="utf-8") as f:
        if seed_path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f) or {}
    return SeedData.from_dict(data)


class SeedDataService:
    """
    Stand-in for the backend fetch that seeds a board.
    The engine never waits on it; callers hand the result to BoardEngine.initialize.
    """

    def __init__(self, seed_path: Optional[str] = None):
        self.seed_path = seed_path

    def fetch(self) -> SeedData:
        if self.seed_path:
            logger.info(f"Loading seed data from {self.seed_path}")
            return load_seed_file(self.seed_path)
        return SeedData.from_dict({"stops": DEMO_STOPS, "groups": DEMO_GROUPS})

    async def fetch_async(self, delay: float = DEFAULT_FETCH_DELAY) -> SeedData:
        await asyncio.sleep(delay)
        return self.fetch()
