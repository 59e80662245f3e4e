"""
Great-circle distance and the live-meter distance accumulator.

Assumption
----------
The live meter measures straight-line (Haversine) hops between consecutive
position fixes; road geometry is never consulted.  Frequent fixes keep the
error small for an auto rickshaw moving through town.

Filter
------
A hop is added to the running total only when

    jitter_floor_km  <  delta  <  teleport_ceiling_km

The floor suppresses GPS jitter while parked; the ceiling drops teleport
artifacts from a bad fix.  Defaults are the native-sampling pair
(0.01 km / 1 km).  The denser browser sampling mode would use a 0.001 km
floor; pass it explicitly if needed.

Every sample, accepted or not, becomes the reference for the next hop, so
a single bad fix costs at most two hops instead of poisoning every later
measurement.

Complexity: O(1) per sample.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

from .entities import PositionSample

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6_371.0

JITTER_FLOOR_KM = 0.01
WEB_JITTER_FLOOR_KM = 0.001
TELEPORT_CEILING_KM = 1.0


def haversine_km(
    lat1: float, lng1: float, lat2: float, lng2: float
) -> float:
    """Return the great-circle distance in **km** between two points."""
    lat1_r, lat2_r = math.radians(lat1), math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)

    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlng / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(a), math.sqrt(1 - a))


class DistanceAccumulator:
    """Turns a stream of absolute fixes into a cumulative distance."""

    def __init__(
        self,
        jitter_floor_km: float = JITTER_FLOOR_KM,
        teleport_ceiling_km: float = TELEPORT_CEILING_KM,
    ):
        if not 0 <= jitter_floor_km < teleport_ceiling_km:
            raise ValueError("jitter floor must be below the teleport ceiling")
        self.jitter_floor_km = jitter_floor_km
        self.teleport_ceiling_km = teleport_ceiling_km
        self._total_km = 0.0
        self._last: Optional[PositionSample] = None
        self.accepted_samples = 0
        self.rejected_samples = 0

    @property
    def total_km(self) -> float:
        return self._total_km

    def accepts(self, delta_km: float) -> bool:
        return self.jitter_floor_km < delta_km < self.teleport_ceiling_km

    def on_sample(self, sample: PositionSample) -> float:
        """Feed one fix and return the (possibly unchanged) running total."""
        previous, self._last = self._last, sample
        if previous is None:
            return self._total_km

        delta = haversine_km(
            previous.latitude, previous.longitude,
            sample.latitude, sample.longitude,
        )
        if not math.isfinite(delta) or not self.accepts(delta):
            self.rejected_samples += 1
            logger.debug("Rejected hop of %.4f km", delta)
            return self._total_km

        self.accepted_samples += 1
        self._total_km += delta
        return self._total_km

    def reset(self) -> None:
        self._total_km = 0.0
        self._last = None
        self.accepted_samples = 0
        self.rejected_samples = 0
