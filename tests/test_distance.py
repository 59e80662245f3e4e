"""Unit tests for haversine distance and the distance accumulator."""

import pytest

from autometer.domain.distance import (
    WEB_JITTER_FLOOR_KM,
    DistanceAccumulator,
    haversine_km,
)
from autometer.domain.entities import PositionSample
from tests.conftest import north_of

KOCHI = (9.9312, 76.2673)


def at(lat_offset_km: float = 0.0, base=KOCHI) -> PositionSample:
    return PositionSample(north_of(base[0], lat_offset_km), base[1])


class TestHaversine:
    def test_same_point_is_zero(self):
        assert haversine_km(*KOCHI, *KOCHI) == 0.0

    def test_one_degree_of_latitude(self):
        assert haversine_km(0, 0, 1, 0) == pytest.approx(111.195, abs=0.01)

    def test_symmetric(self):
        a = haversine_km(9.93, 76.26, 10.01, 76.31)
        b = haversine_km(10.01, 76.31, 9.93, 76.26)
        assert a == pytest.approx(b)

    def test_known_city_pair(self):
        # Kochi -> Thiruvananthapuram, roughly 170 km as the crow flies
        assert haversine_km(9.9312, 76.2673, 8.5241, 76.9366) == pytest.approx(171, abs=15)


class TestDistanceAccumulator:
    def setup_method(self):
        self.acc = DistanceAccumulator()

    def test_first_sample_adds_nothing(self):
        assert self.acc.on_sample(at()) == 0.0

    def test_zero_distance_hop_adds_nothing(self):
        self.acc.on_sample(at())
        assert self.acc.on_sample(at()) == 0.0
        assert self.acc.rejected_samples == 1

    def test_plausible_hop_is_added(self):
        self.acc.on_sample(at(0.0))
        total = self.acc.on_sample(at(0.2))
        assert total == pytest.approx(0.2, rel=1e-3)
        assert self.acc.accepted_samples == 1

    def test_hops_accumulate(self):
        for km in (0.0, 0.1, 0.3, 0.6):
            self.acc.on_sample(at(km))
        assert self.acc.total_km == pytest.approx(0.6, rel=1e-3)

    def test_jitter_is_rejected_under_native_bounds(self):
        self.acc.on_sample(at(0.0))
        assert self.acc.on_sample(at(0.002)) == 0.0  # 2 m

    def test_web_floor_accepts_small_hops(self):
        acc = DistanceAccumulator(jitter_floor_km=WEB_JITTER_FLOOR_KM)
        acc.on_sample(at(0.0))
        assert acc.on_sample(at(0.005)) == pytest.approx(0.005, rel=1e-3)

    def test_teleport_is_rejected(self):
        self.acc.on_sample(at(0.0))
        far = PositionSample(north_of(KOCHI[0], 5000), KOCHI[1])
        assert self.acc.on_sample(far) == 0.0

    def test_rejected_sample_becomes_the_new_reference(self):
        """After a teleport, the next hop is measured from the bad fix."""
        self.acc.on_sample(at(0.0))
        self.acc.on_sample(at(5.0))          # teleport, rejected
        total = self.acc.on_sample(at(5.3))  # 0.3 km from the teleported fix
        assert total == pytest.approx(0.3, rel=1e-3)

    def test_return_from_teleport_is_also_rejected(self):
        self.acc.on_sample(at(0.0))
        self.acc.on_sample(at(5.0))
        assert self.acc.on_sample(at(0.1)) == 0.0

    def test_jittered_sample_becomes_the_new_reference(self):
        self.acc.on_sample(at(0.0))
        self.acc.on_sample(at(0.008))          # jitter, rejected
        total = self.acc.on_sample(at(0.016))  # 8 m from the last fix: rejected too
        assert total == 0.0

    def test_total_never_decreases(self):
        totals = [self.acc.on_sample(at(km)) for km in (0, 0.2, 0.1, 3.0, 3.1, 3.1, 3.5)]
        assert totals == sorted(totals)

    def test_reset_clears_total_and_reference(self):
        self.acc.on_sample(at(0.0))
        self.acc.on_sample(at(0.5))
        self.acc.reset()
        assert self.acc.total_km == 0.0
        assert self.acc.on_sample(at(0.9)) == 0.0  # first sample again

    def test_bounds_must_be_ordered(self):
        with pytest.raises(ValueError):
            DistanceAccumulator(jitter_floor_km=1.0, teleport_ceiling_km=0.5)
