import math

import pytest

from ppg_hrv.models import HRVMetrics
from ppg_hrv.utils.hrv import compose_stress_indices, stress_level_for_score


def _metrics(**overrides):
    values = dict(
        mean_rr=800.0, bpm=75.0, sdnn=50.0, rmssd=40.0, pnn50=20.0,
        lf=1000.0, hf=500.0, lf_hf_ratio=2.0,
        sd1=28.0, sd2=65.0, ellipse_area=5718.0, sample_entropy=1.2,
    )
    values.update(overrides)
    return HRVMetrics(**values)


def test_composite_from_metrics():
    s = compose_stress_indices(_metrics())

    assert s.stress_index == pytest.approx(20.0)
    assert s.ans_balance == pytest.approx(2.0)
    assert s.hrv_index == pytest.approx(40.0)
    assert s.stress_resistance == pytest.approx(2.5)
    assert s.hr_stability == pytest.approx(16.0)
    assert s.recovery_index == pytest.approx(20.0)
    assert s.activation_index == pytest.approx(2.0)
    assert s.relaxation_index == pytest.approx(math.log(500.0))
    # 20*0.3 + 2*10*0.2 + 2.5*0.2 + 80*0.3
    assert s.overall_stress_score == pytest.approx(34.5)
    assert s.stress_level == 2


def test_zero_denominators_give_zero():
    s = compose_stress_indices(_metrics(sdnn=0.0, rmssd=0.0, hf=0.0, lf_hf_ratio=0.0))

    assert s.stress_index == 0.0
    assert s.stress_resistance == 0.0
    assert s.hr_stability == 0.0
    assert s.relaxation_index == 0.0
    assert all(math.isfinite(v) for v in s.model_dump().values())
    # only the recovery term is left
    assert s.overall_stress_score == pytest.approx(24.0)


def test_score_is_clamped_to_100():
    s = compose_stress_indices(_metrics(sdnn=1e-6))
    assert s.overall_stress_score == 100.0
    assert s.stress_level == 5


def test_full_recovery_gives_minimum_score():
    s = compose_stress_indices(_metrics(sdnn=0.0, rmssd=0.0, lf_hf_ratio=0.0, pnn50=100.0))
    assert s.overall_stress_score == 0.0
    assert s.stress_level == 1


@pytest.mark.parametrize("score, level", [
    (0.0, 1), (19.99, 1), (20.0, 2), (39.9, 2), (40.0, 3),
    (59.99, 3), (60.0, 4), (79.99, 4), (80.0, 5), (100.0, 5),
])
def test_stress_level_bands(score, level):
    assert stress_level_for_score(score) == level
