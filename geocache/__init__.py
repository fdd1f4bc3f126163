"""geocache: deterministic cache world for a location-based collectible game.

Core Objects: GameState, GameConfig, CoordinateQuantizer, CacheStateStore, ViewportEngine
"""

import datetime

__all__ = [
    "CacheRecord",
    "CacheRecordView",
    "CacheStateStore",
    "Cell",
    "CellFlyweight",
    "CoordinateQuantizer",
    "Deposit",
    "Direction",
    "GameConfig",
    "GameState",
    "Harvest",
    "ItemIdentity",
    "MovePlayer",
    "Reset",
    "Step",
    "ViewportEngine",
    "VisibilityDiff",
    "VisibilityEvent",
    "luck",
]

__title__ = "geocache"
__version__ = "0.1.0"
__license__ = "Apache 2.0"
_this_year = datetime.datetime.now(tz=datetime.UTC).date().year
__copyright__ = f"Copyright {_this_year} geocache contributors"

from geocache.cache_store import (  # noqa: E402
    CacheRecord,
    CacheRecordView,
    CacheStateStore,
    ItemIdentity,
)
from geocache.commands import Deposit, Direction, Harvest, MovePlayer, Reset, Step  # noqa: E402
from geocache.config import GameConfig  # noqa: E402
from geocache.game import GameState  # noqa: E402
from geocache.randomness import luck  # noqa: E402
from geocache.space import Cell, CellFlyweight, CoordinateQuantizer  # noqa: E402
from geocache.viewport import ViewportEngine, VisibilityDiff, VisibilityEvent  # noqa: E402
