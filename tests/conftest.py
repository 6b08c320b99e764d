from typing import List, Optional, Sequence

import pytest

from graph_builder import build_road_graph
from models import DangerZone, Point

GRID_STEP = 0.001  # ~111 m at the equator


def grid_polylines(size: int = 3):
    """Streets of a size x size block grid anchored at (0, 0)."""
    coords = [i * GRID_STEP for i in range(size)]
    rows = [[(lat, lon) for lon in coords] for lat in coords]
    cols = [[(lat, lon) for lat in coords] for lon in coords]
    return rows + cols


@pytest.fixture
def road_grid():
    return build_road_graph(grid_polylines())


class FakeStrategy:
    def __init__(self, name: str, route: Optional[List[Point]] = None, error: Optional[Exception] = None):
        self.name = name
        self.route = route
        self.error = error
        self.calls = 0

    async def find(self, start: Point, end: Point, zones: Sequence[DangerZone]):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.route


@pytest.fixture
def make_strategy():
    return FakeStrategy
