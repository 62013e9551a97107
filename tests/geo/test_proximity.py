from __future__ import annotations

import pytest

from src.qr_attendance.qr_attendance.core.exceptions import (
    LocationUnavailable,
    ProximityRejected,
    ValidationError,
)
from src.qr_attendance.qr_attendance.geo.factory import ThresholdPolicyFactory
from src.qr_attendance.qr_attendance.geo.model import GeoPoint
from src.qr_attendance.qr_attendance.geo.policies.accuracy_policy import AccuracyAdjustedPolicy
from src.qr_attendance.qr_attendance.geo.policies.fixed_policy import FixedThresholdPolicy
from src.qr_attendance.qr_attendance.geo.proximity import ProximityValidator, haversine_distance

ORIGIN = GeoPoint(latitude=0.0, longitude=0.0)


def test_distance_to_self_is_zero():
    point = GeoPoint(latitude=51.5007, longitude=-0.1246)
    assert haversine_distance(point, point) == 0


def test_known_distance_one_ten_thousandth_degree_at_equator():
    d = haversine_distance(ORIGIN, GeoPoint(latitude=0.0, longitude=0.0001))
    assert d == pytest.approx(11.12, abs=0.01)


def test_student_eleven_meters_away_is_rejected_with_ten_meter_threshold():
    validator = ProximityValidator(FixedThresholdPolicy(10))

    with pytest.raises(ProximityRejected) as exc:
        validator.check(GeoPoint(latitude=0.0, longitude=0.0001), ORIGIN)

    assert exc.value.distance_meters > 10
    assert exc.value.allowed_meters == 10


def test_student_on_the_anchor_is_accepted():
    verdict = ProximityValidator(FixedThresholdPolicy(10)).check(ORIGIN, ORIGIN)
    assert verdict.accepted
    assert verdict.distance_meters == 0


def test_exact_boundary_distance_is_accepted():
    device = GeoPoint(latitude=0.0, longitude=0.0001)
    boundary = haversine_distance(device, ORIGIN)

    verdict = ProximityValidator(FixedThresholdPolicy(boundary)).check(device, ORIGIN)

    assert verdict.accepted


def test_missing_device_location_is_unavailable():
    with pytest.raises(LocationUnavailable):
        ProximityValidator().check(None, ORIGIN)


def test_accuracy_policy_widens_radius_by_both_fixes():
    policy = AccuracyAdjustedPolicy(10)
    device = GeoPoint(latitude=0.0, longitude=0.0001, accuracy=1.5)
    anchor = GeoPoint(latitude=0.0, longitude=0.0, accuracy=0.5)

    assert policy.allowed_distance(device=device, anchor=anchor) == 12.0
    assert ProximityValidator(policy).check(device, anchor).accepted


def test_accuracy_policy_slack_is_capped():
    policy = AccuracyAdjustedPolicy(10, max_slack_meters=5)
    device = GeoPoint(latitude=0.0, longitude=0.0, accuracy=500)

    assert policy.allowed_distance(device=device, anchor=ORIGIN) == 15.0


def test_factory_picks_policy_by_mode():
    factory = ThresholdPolicyFactory()

    assert isinstance(factory.for_mode("fixed", threshold_meters=10), FixedThresholdPolicy)
    assert isinstance(factory.for_mode("ACCURACY", threshold_meters=10), AccuracyAdjustedPolicy)
    with pytest.raises(ValidationError):
        factory.for_mode("bluetooth", threshold_meters=10)


def test_geo_point_parses_lon_lat_pair_of_strings():
    point = GeoPoint.from_lon_lat(["67.0011", "24.8607"])

    assert point.longitude == pytest.approx(67.0011)
    assert point.latitude == pytest.approx(24.8607)


@pytest.mark.parametrize("lat, lon", [(91, 0), (0, -181)])
def test_geo_point_rejects_out_of_range_coordinates(lat, lon):
    with pytest.raises(ValidationError):
        GeoPoint(latitude=lat, longitude=lon)


def test_origin_counts_as_unset():
    assert ORIGIN.is_unset
    assert not GeoPoint(latitude=0.0, longitude=0.0001).is_unset
