import pytest

from SafetyClassifier import (GREEN, RED, YELLOW, InvalidScoreError, SafetyCategory, alert_style,
                              classify_direct, classify_normalized, clamp_score, estimated_walk_minutes,
                              normalize_score, route_line_style, turn_count, validate_score)
from SafetyRoute import CrimeRate, FootTraffic, Lighting, SafetyRoute

RANK = {SafetyCategory.UNSAFE: 0, SafetyCategory.MODERATE: 1, SafetyCategory.SAFE: 2}


def make_route(score=4.5, n_points=5):
    return SafetyRoute(
        id=1,
        name="Route A",
        safety_score=score,
        foot_traffic=FootTraffic.HIGH,
        lighting=Lighting.GOOD,
        crime_rate=CrimeRate.LOW,
        coordinates=tuple((37.77 + i * 0.001, -122.42 + i * 0.001) for i in range(n_points)),
    )


def test_direct_boundaries():
    assert classify_direct(4.0).category is SafetyCategory.SAFE
    assert classify_direct(3.999).category is SafetyCategory.MODERATE
    assert classify_direct(3.0).category is SafetyCategory.MODERATE
    assert classify_direct(2.999).category is SafetyCategory.UNSAFE


def test_direct_colors():
    assert classify_direct(4.5).color == GREEN
    assert classify_direct(3.5).color == YELLOW
    assert classify_direct(2.8).color == RED


def test_normalized_boundaries():
    # 3.5 * 2 = 7 is not > 7
    assert classify_normalized(3.5).category is SafetyCategory.MODERATE
    assert classify_normalized(3.51).category is SafetyCategory.SAFE
    assert classify_normalized(2.0).category is SafetyCategory.MODERATE
    assert classify_normalized(1.99).category is SafetyCategory.UNSAFE


def test_normalized_accepts_ten_point_scale():
    assert normalize_score(8.0) == 8.0
    assert normalize_score(4.0) == 8.0
    assert classify_normalized(7.5).category is SafetyCategory.SAFE
    assert classify_normalized(5.0).category is SafetyCategory.SAFE


def test_policies_disagree_in_the_middle_band():
    assert classify_direct(3.6).category is SafetyCategory.MODERATE
    assert classify_normalized(3.6).category is SafetyCategory.SAFE


@pytest.mark.parametrize("classify", [classify_direct, classify_normalized])
def test_monotonic_over_domain(classify):
    scores = [i / 100 for i in range(0, 501)]
    ranks = [RANK[classify(s).category] for s in scores]
    assert set(ranks) == {0, 1, 2}
    assert ranks == sorted(ranks)


def test_validate_score_rejects_out_of_domain():
    assert validate_score(2.5) == 2.5
    for bad in (-0.1, 5.01, float("nan")):
        with pytest.raises(InvalidScoreError):
            validate_score(bad)


def test_out_of_domain_scores_are_clamped():
    assert clamp_score(-3) == 0.0
    assert clamp_score(9) == 5.0
    assert clamp_score(float("nan")) == 0.0
    assert classify_direct(12).category is SafetyCategory.SAFE
    assert classify_direct(-1).category is SafetyCategory.UNSAFE
    assert classify_direct(float("nan")).category is SafetyCategory.UNSAFE
    assert classify_normalized(42).category is SafetyCategory.SAFE


def test_classification_is_pure():
    assert classify_direct(3.3) == classify_direct(3.3)
    info = classify_normalized(4.5)
    assert info.label == "Safe"
    assert info.icon == "✓"
    assert "good lighting" in info.description
    assert info.to_dict()["category"] == "Safe"


def test_route_line_style():
    route = make_route(score=2.8)
    sel = route_line_style(route, selected=True)
    other = route_line_style(route, selected=False)
    assert sel == {"color": RED, "weight": 7, "opacity": 0.9, "dash_array": None}
    assert other == {"color": RED, "weight": 5, "opacity": 0.7, "dash_array": "5, 5"}


def test_walk_estimate_and_turns():
    route = make_route(n_points=5)
    assert estimated_walk_minutes(route) == 15
    assert turn_count(route) == 4


def test_alert_style_falls_back_to_info():
    assert alert_style("danger")["bg"] == "bg-red-50"
    assert alert_style("bogus") == alert_style("info")
    assert alert_style("warning")["icon"] == "exclamation-triangle"
