"""
Start-Point Lookup via H3 Spatial Binning
=========================================

1. **Spatial Binning** -- every network element is indexed by its H3 cell
   (resolution 8 by default, ~0.74 km² hexagons).
2. **Candidate Search** -- for a client location, the search area is the
   client's cell plus ``rings`` rings of neighbours (``h3.grid_disk``).
3. **Ranking** -- candidates are ordered by straight-line geodesic
   distance to the client; ties broken by id for a stable order.

Complexity
----------
* Cell lookup:   O(1)
* Search area:   O(k^2) cells for k rings
* Ranking:       O(m log m) for m candidates
"""

from __future__ import annotations

from typing import Iterable

import h3

from .distance import compute_distance
from .entities import GeoPoint, StartPoint


def h3_cell(point: GeoPoint, resolution: int = 8) -> str:
    """Map a geo-point to an H3 hexagonal cell index.  O(1)."""
    return h3.latlng_to_cell(point.latitude, point.longitude, resolution)


def search_cells(point: GeoPoint, resolution: int = 8, rings: int = 2) -> set[str]:
    """Cells within *rings* hops of the cell containing *point*."""
    return set(h3.grid_disk(h3_cell(point, resolution), rings))


def rank_start_points(
    client_location: GeoPoint,
    candidates: Iterable[StartPoint],
    limit: int | None = None,
) -> list[tuple[StartPoint, float]]:
    """Return ``(start_point, distance_m)`` pairs, nearest first."""
    ranked = sorted(
        (
            (candidate, compute_distance(candidate.location, client_location))
            for candidate in candidates
        ),
        key=lambda pair: (pair[1], pair[0].id),
    )
    if limit is not None:
        ranked = ranked[:limit]
    return ranked
