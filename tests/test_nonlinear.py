import math
import statistics

import numpy as np
import pytest

from ppg_hrv.serializers import metrics_row
from ppg_hrv.utils.hrv import compute_hrv_metrics, compute_poincare, compute_sample_entropy, count_matches, poincare_points


def _count_matches_loop(rr, length, tolerance):
    n = len(rr)
    count = 0
    for i in range(n - length + 1):
        for j in range(i + 1, n - length + 1):
            if max(abs(rr[i + k] - rr[j + k]) for k in range(length)) <= tolerance:
                count += 1
    return count


def test_poincare_known_series():
    rr = [800, 820, 780, 810]
    result = compute_poincare(rr)

    diffs = [b - a for a, b in zip(rr[:-1], rr[1:])]
    sums = [b + a for a, b in zip(rr[:-1], rr[1:])]
    assert result["sd1"] == pytest.approx(statistics.pstdev(diffs) / math.sqrt(2))
    assert result["sd2"] == pytest.approx(statistics.pstdev(sums) / math.sqrt(2))
    assert result["ellipse_area"] == pytest.approx(math.pi * result["sd1"] * result["sd2"])


def test_poincare_reversal_keeps_ellipse():
    rr = [812, 790, 845, 760, 802, 830, 775]
    forward = compute_poincare(rr)
    backward = compute_poincare(rr[::-1])

    for key in ("sd1", "sd2", "ellipse_area"):
        assert backward[key] == pytest.approx(forward[key])


def test_poincare_short_series():
    assert compute_poincare([800]) == {"sd1": 0.0, "sd2": 0.0, "ellipse_area": 0.0}


def test_poincare_points_pair_successive_intervals():
    points = poincare_points([800, 820, 780])
    assert [(p.x, p.y) for p in points] == [(800.0, 820.0), (820.0, 780.0)]
    assert poincare_points([800]) == []


@pytest.mark.parametrize("length", [2, 3])
def test_count_matches_agrees_with_pairwise_loop(length):
    rng = np.random.default_rng(3)
    rr = rng.normal(800, 30, size=60).round().tolist()
    tolerance = 0.2 * float(np.std(rr))
    assert count_matches(rr, length, tolerance) == _count_matches_loop(rr, length, tolerance)


def test_sample_entropy_of_periodic_series_is_low():
    se = compute_sample_entropy([800, 820] * 20)
    # 342 matching 3-templates out of 361 matching 2-templates
    assert se == pytest.approx(-math.log(342 / 361))
    assert 0.0 <= se < 0.1


def test_sample_entropy_constant_series():
    # every template matches at zero tolerance
    assert compute_sample_entropy([750.0] * 7) == pytest.approx(-math.log(10 / 15))


def test_sample_entropy_without_matches_is_zero():
    assert compute_sample_entropy([800, 900, 1000, 1100, 1200]) == 0.0


def test_sample_entropy_without_longer_matches_is_infinite():
    rr = [800, 800, 1000, 800, 800, 1200]
    tolerance = 0.2 * float(np.std(rr))
    assert count_matches(rr, 2, tolerance) == 1
    assert count_matches(rr, 3, tolerance) == 0

    assert compute_sample_entropy(rr) == math.inf


def test_infinite_sample_entropy_is_blank_in_rows():
    metrics = compute_hrv_metrics([800, 800, 1000, 800, 800, 1200])
    assert metrics.sample_entropy == math.inf
    assert metrics_row(metrics)["sample_entropy"] is None


def test_count_matches_long_series():
    # every template of a constant series matches every other one
    rr = [800.0] * 4000
    assert count_matches(rr, 2, 0.0) == 3999 * 3998 // 2
    assert count_matches(rr, 3, 0.0) == 3998 * 3997 // 2


@pytest.mark.parametrize("rr", [[], [800], [800, 820]])
def test_sample_entropy_short_series(rr):
    assert compute_sample_entropy(rr) == 0.0
