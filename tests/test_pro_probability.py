"""
Tests for pro-probability interpolation, HoF eligibility and professional adjustments.
"""
import pytest

from services.hof_eligibility import (
    HOF_MIN_SEASONS,
    check_hof_eligibility,
    eligible_season_count,
    estimate_hof_probability,
)
from services.pro_probability import (
    FLOOR_PROBABILITY,
    PRO_PROBABILITY_TIERS,
    UNVERIFIED_CAP,
    find_tier,
    interpolate_pro_probability,
    is_verified_pro,
    pro_probability_for,
)
from services.professional_adjustments import (
    contract_modifier,
    release_penalty_pct,
    verified_boost_total,
)


class TestInterpolation:

    def test_elite_interpolation(self):
        assert interpolate_pro_probability(82) == pytest.approx(77.4)

    def test_tier_floors(self):
        assert interpolate_pro_probability(80) == pytest.approx(75)
        assert interpolate_pro_probability(65) == pytest.approx(45)
        assert interpolate_pro_probability(0) == pytest.approx(0.1)

    def test_top_of_scale(self):
        assert find_tier(100).name == "elite"
        assert interpolate_pro_probability(100) == pytest.approx(99)

    def test_range_and_monotonic(self):
        previous = None
        for tenth in range(0, 1001):
            probability = interpolate_pro_probability(tenth / 10)
            assert FLOOR_PROBABILITY <= probability <= UNVERIFIED_CAP
            if previous is not None:
                assert probability >= previous
            previous = probability

    def test_tiers_contiguous(self):
        ordered = sorted(PRO_PROBABILITY_TIERS, key=lambda t: t.min_score)
        assert ordered[0].min_score == 0
        assert ordered[-1].max_score == 100
        for lower, upper in zip(ordered, ordered[1:]):
            assert lower.max_score == upper.min_score

    def test_out_of_range_clamped(self):
        assert interpolate_pro_probability(150) == pytest.approx(99)
        assert interpolate_pro_probability(-20) == pytest.approx(0.1)

    def test_garbage_gets_floor(self):
        assert interpolate_pro_probability(None) == FLOOR_PROBABILITY
        assert interpolate_pro_probability(float("nan")) == FLOOR_PROBABILITY


class TestVerifiedPro:

    def test_roster_verified_mlb(self):
        assert is_verified_pro(True, "MLB")
        assert pro_probability_for(10, verified_pro=True) == 100

    def test_unverified_capped(self):
        assert not is_verified_pro(False, "mlb")
        assert not is_verified_pro(True, "milb")
        assert pro_probability_for(100) == UNVERIFIED_CAP


class TestHofEligibility:

    def test_requires_full_verification(self):
        for seasons in (0, 5, 20):
            assert not check_hof_eligibility(99, {"mlb": seasons}, "baseball").eligible

    def test_baseball_five_mlb_seasons(self):
        result = check_hof_eligibility(100, {"mlb": 5}, "baseball")

        assert result.eligible
        assert result.eligible_seasons == 5
        assert result.seasons_remaining == 0

    def test_baseball_ignores_other_leagues(self):
        result = check_hof_eligibility(100, {"mlb": 3, "ausl": 4, "milb": 6}, "baseball")

        assert not result.eligible
        assert result.eligible_seasons == 3
        assert result.seasons_remaining == 2

    def test_softball_sums_mlb_and_ausl(self):
        assert eligible_season_count("softball", {"mlb": 2, "ausl": 3}) == 5
        assert check_hof_eligibility(100, {"mlb": 2, "ausl": 3}, "softball").eligible

    def test_countdown_floored(self):
        result = check_hof_eligibility(100, {"mlb": 12}, "baseball")
        assert result.seasons_remaining == 0
        assert result.required_seasons == HOF_MIN_SEASONS

    def test_hof_probability(self):
        # 5 * 3 + 80 * 0.3 + 10
        assert estimate_hof_probability(5, 80, delta_maturity=3) == pytest.approx(49)
        assert estimate_hof_probability(5, 80) == pytest.approx(39)
        assert estimate_hof_probability(40, 100, 1) == 99


class TestProfessionalAdjustments:

    @pytest.mark.parametrize("count,penalty", [(0, 0), (1, 12), (2, 18), (3, 25), (4, 30), (9, 30)])
    def test_release_penalties(self, count, penalty):
        assert release_penalty_pct(count) == penalty

    def test_contract_modifiers(self):
        assert contract_modifier("active") == 1.0
        assert contract_modifier(None) == 1.0
        assert contract_modifier("free_agent") == 0.95
        assert contract_modifier("injured_list") == 0.90
        assert contract_modifier("released", 2) == pytest.approx(0.82)
        assert contract_modifier("retired") == 0.0

    def test_verified_boosts_scaled_by_confidence(self):
        profiles = [
            {"profile_type": "ncaa_d1", "confidence_weight": 50},
            {"profile_type": "milb", "confidence_weight": 100},
            {"profile_type": "beer_league", "confidence_weight": 100},
        ]
        assert verified_boost_total(profiles) == pytest.approx(6 + 8)
