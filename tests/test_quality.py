import numpy as np
import pytest

from ppg_hrv.utils.quality import (
    assess_signal_quality,
    hr_autocorrelation,
    hr_frequency_domain,
    hr_time_domain,
    majority_vote,
    perfusion_index,
    quality_status,
    signal_quality_index,
    spo2_variability,
    waveform_periodicity,
    weighted_median,
)

from signals import sine_wave


def test_perfusion_index():
    result = perfusion_index([100.0, 300.0])
    assert result == {"pi": pytest.approx(50.0), "dc": 200.0, "ac": 100.0, "is_valid": True}

    weak = perfusion_index(sine_wave(amplitude=50))
    assert weak["pi"] == pytest.approx(0.1, rel=1e-3)
    assert not weak["is_valid"]

    assert perfusion_index([]) == {"pi": 0.0, "dc": 0.0, "ac": 0.0, "is_valid": False}


@pytest.mark.parametrize("bpm", [50, 80, 125])
def test_hr_time_domain(bpm):
    assert hr_time_domain(sine_wave(bpm=bpm, seconds=20), 100) == bpm


@pytest.mark.parametrize("bpm", [50, 80, 125])
def test_hr_frequency_domain(bpm):
    # 2048-point spectrum at 100 Hz resolves about 3 bpm
    assert abs(hr_frequency_domain(sine_wave(bpm=bpm, seconds=20), 100) - bpm) <= 2


@pytest.mark.parametrize("bpm", [50, 125])
def test_hr_autocorrelation(bpm):
    assert abs(hr_autocorrelation(sine_wave(bpm=bpm, seconds=20), 100) - bpm) <= 1


def test_hr_estimators_reject_implausible_rates():
    slow = sine_wave(bpm=20, seconds=20)
    assert hr_time_domain(slow, 100) is None

    ramp = np.linspace(1000.0, 2000.0, 25)
    assert hr_time_domain(ramp, 100) is None
    assert hr_frequency_domain(ramp, 100) is None
    assert hr_autocorrelation(ramp, 100) is None


def test_hr_estimators_need_enough_samples():
    short = sine_wave(seconds=0.09)
    assert hr_time_domain(short, 100) is None
    assert hr_frequency_domain(short, 100) is None
    assert hr_autocorrelation(short, 100) is None


def test_waveform_periodicity():
    assert waveform_periodicity(sine_wave(bpm=125, seconds=20), 100) == pytest.approx(1.0)
    assert waveform_periodicity(sine_wave(bpm=80, seconds=6), 100) == pytest.approx(1.0)
    assert waveform_periodicity(np.full(600, 50000.0), 100) == 0.0
    assert waveform_periodicity(np.ones(10), 100) == 0.0


def test_spo2_variability():
    assert spo2_variability([98, None, 0, 96, float("nan")]) == pytest.approx(1.0)
    assert spo2_variability([98]) == 0.0
    assert spo2_variability([]) == 0.0


def test_signal_quality_index_factors():
    sqi = signal_quality_index(0.4, 80, [80, 85], previous_hr=100, spo2_var=3.0, periodicity=0.5)
    # 0.15 + 0.2 + 0.2 + 0.075 + 0.1 + 0.025
    assert sqi == pytest.approx(0.75)


def test_signal_quality_index_full_marks_capped():
    assert signal_quality_index(5.0, 80, [80, 81, 80], previous_hr=82, spo2_var=0.5, periodicity=1.0) == pytest.approx(1.0)


def test_signal_quality_index_nothing_usable():
    assert signal_quality_index(0.1, None, [None, 300]) == 0.0


@pytest.mark.parametrize("sqi, pi, status", [
    (0.9, 2.0, "normal"),
    (0.9, 0.4, "low_quality"),
    (0.4, 0.4, "low_quality"),
    (0.6, 0.1, "low_quality"),
    (0.4, 0.1, "reposition_needed"),
])
def test_quality_status(sqi, pi, status):
    assert quality_status(sqi, pi) == status


def test_weighted_median():
    assert weighted_median([(100, 0.3), (60, 0.2), (80, 0.5)]) == 80
    # out-of-range and unweighted candidates do not vote
    assert weighted_median([(30, 1.0), (250, 1.0), (90, 0.0), (70, 0.4)]) == 70
    assert weighted_median([]) is None
    assert weighted_median([(None, 1.0)]) is None


def test_majority_vote():
    assert majority_vote([(80.4, 0.3), (79.6, 0.3), (100, 0.5)]) == 80
    assert majority_vote([(300, 1.0)]) is None


def test_assess_clean_signal():
    q = assess_signal_quality(sine_wave(bpm=125, seconds=20), 100)

    assert q.pi_valid
    assert q.perfusion_index == pytest.approx(2.0, rel=1e-3)
    assert [c.method for c in q.candidates] == ["time_domain", "frequency_domain", "autocorrelation"]
    assert q.heart_rate == 125
    # perfusion 0.3, plausible 0.2, agreement 0.2, periodicity 0.15, SpO2 0.05
    assert q.sqi == pytest.approx(0.9)
    assert q.status == "normal"


def test_assess_uses_previous_heart_rate():
    q = assess_signal_quality(sine_wave(bpm=125, seconds=20), 100, previous_hr=120)
    assert q.candidates[-1].method == "prediction"
    assert q.candidates[-1].value == 120
    assert q.heart_rate == 125
    assert q.sqi == pytest.approx(1.0)


def test_assess_noisy_spo2_lowers_sqi():
    signal = sine_wave(bpm=125, seconds=20)
    spo2 = [95.0, 99.0] * 1000
    assert assess_signal_quality(signal, 100, spo2=spo2).sqi == pytest.approx(0.875)


def test_assess_low_perfusion():
    q = assess_signal_quality(sine_wave(amplitude=50), 100)
    assert q.status == "low_pi"
    assert q.candidates == ()
    assert q.heart_rate is None
    assert q.sqi == 0.0


def test_assess_without_heart_rate():
    q = assess_signal_quality(np.linspace(1000.0, 2000.0, 25), 100)
    assert q.pi_valid
    assert q.status == "no_hr"
    assert q.heart_rate is None
