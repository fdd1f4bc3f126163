"""Cell-based view of the coordinate plane.

Provides the pieces that turn continuous (lat, lng) positions into discrete cells:
- Cell: immutable identity of one quantization unit
- CellFlyweight: canonical Cell object per (i, j), kept for the whole session
- CoordinateQuantizer: floors scaled coordinates onto the grid and back to bounds

The grid is unbounded: cells exist for any coordinate that fits the packed cell key.
"""

from geocache.space.cell import Cell, pack_key, unpack_key
from geocache.space.quantizer import CellFlyweight, CoordinateQuantizer

__all__ = [
    "Cell",
    "CellFlyweight",
    "CoordinateQuantizer",
    "pack_key",
    "unpack_key",
]
