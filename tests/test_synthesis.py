"""
Tests for the Climate Profile Table and the Offline Synthesis Model

These tests verify that:
1. The climate table resolves day offsets and display dates
2. The diurnal temperature curve has its trough at 05:00
3. Humidity is inverse to temperature and stays within 10-95%
4. Each cloud profile stays inside its noise band
5. Injected randomness makes the output reproducible

Run with: python -m pytest tests/test_synthesis.py -v
"""

import logging
import random
from dataclasses import replace
from datetime import date, datetime

import pytest

from gridpilot.climate import AGRA_BASE, profile_for, ten_day_outlook
from gridpilot.models import ClimateProfile, CloudProfileKind
from gridpilot.synthesis import OFFLINE_SOURCE, diurnal_temperature, synthesize

logger = logging.getLogger(__name__)

TODAY = date(2026, 10, 18)


class ConstantRng:
    """random() always returns the same value."""

    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value


def make_profile(kind: CloudProfileKind, min_t: float = 12.0, max_t: float = 28.0,
                 humid_base: float = 45.0) -> ClimateProfile:
    return ClimateProfile(0, "Test", max_t, min_t, humid_base, kind, 6.72, 18.25, "Sun, 18 Oct 2026")


class TestClimateProfiles:

    def test_table_has_ten_days(self):
        assert [p.day_offset for p in AGRA_BASE] == list(range(10))

    def test_today_profile(self):
        profile = profile_for(0, TODAY)
        logger.info(f"[TEST] Today's profile: {profile}")

        assert profile.condition == "Clear"
        assert profile.cloud_profile == CloudProfileKind.CLEAR
        assert profile.date == "Sun, 18 Oct 2026"

    def test_offset_shifts_display_date(self):
        profile = profile_for(3, TODAY)
        assert profile.cloud_profile == CloudProfileKind.AFTERNOON_BUILDUP
        assert profile.date == "Wed, 21 Oct 2026"

    @pytest.mark.parametrize("offset", [-1, 10, 99])
    def test_out_of_range_clamps_to_today(self, offset):
        assert profile_for(offset, TODAY) == profile_for(0, TODAY)

    def test_table_is_not_mutated(self):
        profile_for(4, TODAY)
        assert AGRA_BASE[4].date == ""

    def test_every_profile_has_sunrise_before_sunset(self):
        for p in ten_day_outlook(TODAY):
            assert 0 <= p.sunrise_hour < p.sunset_hour < 24
            assert p.min_t < p.max_t

    def test_ten_day_outlook_dates(self):
        outlook = ten_day_outlook(TODAY)
        assert len(outlook) == 10
        assert outlook[-1].date == "Tue, 27 Oct 2026"


class TestSynthesize:

    def test_shape_and_meta(self):
        now = datetime(2026, 10, 18, 9, 30, 0)
        result = synthesize(profile_for(0, TODAY), rng=random.Random(1), now=now)

        for field in ("hourly_temp", "hourly_humidity", "hourly_cloud"):
            assert len(result[field]) == 24
        assert result["sunrise_hour"] == 6.72
        assert result["sunset_hour"] == 18.25
        assert result["meta"]["is_fallback"] is True
        assert result["meta"]["source"] == OFFLINE_SOURCE[:25]
        assert result["meta"]["date"] == "Sun, 18 Oct 2026"
        assert result["meta"]["last_updated"] == "09:30:00"
        assert "error" not in result

    def test_temperature_extremes(self):
        result = synthesize(make_profile(CloudProfileKind.CLEAR), rng=random.Random(0))
        temps = result["hourly_temp"]
        logger.info(f"[TEST] Temperatures: {temps}")

        assert temps[5] == pytest.approx(12.0)
        assert min(temps) == temps[5]
        # 24h half-cosine: warmest hour is 12 hours after the trough
        assert max(temps) == pytest.approx(28.0)
        assert temps[17] == pytest.approx(28.0)
        assert temps[15] == pytest.approx(diurnal_temperature(15, 12.0, 28.0), abs=0.05)
        assert temps[15] > 26.5

    def test_humidity_inverse_to_temperature(self):
        result = synthesize(make_profile(CloudProfileKind.CLEAR), rng=random.Random(0))
        hum = result["hourly_humidity"]

        assert hum[5] == pytest.approx(75.0)   # coldest hour: base + 30
        assert hum[17] == pytest.approx(45.0)  # warmest hour: base
        assert hum[5] > hum[15]

    def test_humidity_clamped(self):
        wet = synthesize(make_profile(CloudProfileKind.CLEAR, humid_base=90), rng=random.Random(0))
        dry = synthesize(make_profile(CloudProfileKind.CLEAR, humid_base=-40), rng=random.Random(0))

        assert max(wet["hourly_humidity"]) == 95.0
        assert min(dry["hourly_humidity"]) == 10.0
        for result in (wet, dry):
            assert all(10 <= h <= 95 for h in result["hourly_humidity"])

    def test_flat_profile_does_not_divide_by_zero(self):
        result = synthesize(make_profile(CloudProfileKind.HAZY, min_t=20, max_t=20), rng=random.Random(0))
        assert set(result["hourly_temp"]) == {20.0}
        assert set(result["hourly_humidity"]) == {75.0}

    @pytest.mark.parametrize("kind,low,high", [
        (CloudProfileKind.CLEAR, 0, 5),
        (CloudProfileKind.HAZY, 10, 20),
        (CloudProfileKind.OVERCAST, 70, 90),
    ])
    def test_cloud_bands(self, kind, low, high):
        rng = random.Random(1234)
        for _ in range(50):
            clouds = synthesize(make_profile(kind), rng=rng)["hourly_cloud"]
            assert all(low <= c <= high for c in clouds), clouds

    def test_afternoon_buildup_peaks_in_afternoon(self):
        rng = random.Random(99)
        for _ in range(50):
            clouds = synthesize(make_profile(CloudProfileKind.AFTERNOON_BUILDUP), rng=rng)["hourly_cloud"]
            afternoon = sum(clouds[13:18]) / 5
            night = sum(clouds[0:5]) / 5
            assert afternoon > night
            assert all(0 <= c <= 100 for c in clouds)

    def test_afternoon_buildup_shape_with_fixed_noise(self):
        clouds = synthesize(make_profile(CloudProfileKind.AFTERNOON_BUILDUP), rng=ConstantRng(0.5))["hourly_cloud"]

        assert clouds[15] == pytest.approx(47.5)  # 40 + 7.5
        assert clouds[13] == pytest.approx(27.5)  # 20 + 7.5
        assert clouds[12] == pytest.approx(17.5)  # 10 + 7.5
        assert clouds[0] == pytest.approx(5.0)
        assert clouds[19] == pytest.approx(5.0)

    def test_fixed_noise_band_midpoints(self):
        mid = ConstantRng(0.5)
        assert set(synthesize(make_profile(CloudProfileKind.CLEAR), rng=mid)["hourly_cloud"]) == {2.5}
        assert set(synthesize(make_profile(CloudProfileKind.HAZY), rng=mid)["hourly_cloud"]) == {15.0}
        assert set(synthesize(make_profile(CloudProfileKind.OVERCAST), rng=mid)["hourly_cloud"]) == {80.0}

    def test_seeded_rng_is_reproducible(self):
        profile = profile_for(3, TODAY)
        first = synthesize(profile, rng=random.Random(42))
        second = synthesize(profile, rng=random.Random(42))

        assert first["hourly_cloud"] == second["hourly_cloud"]
        assert first["hourly_temp"] == second["hourly_temp"]

    def test_profile_date_flows_to_meta(self):
        profile = replace(profile_for(0, TODAY), date="Custom")
        assert synthesize(profile)["meta"]["date"] == "Custom"
