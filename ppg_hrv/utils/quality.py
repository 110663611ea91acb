"""
Signal quality of an IR batch.

Perfusion index, three independent heart-rate estimates (peak spacing,
dominant spectral frequency, autocorrelation lag), waveform periodicity and a
0-1 signal quality index (SQI) per estimate. The estimates are fused with an
SQI-weighted median. Nothing here keeps state between batches; a previous
heart rate only takes part when the caller passes one.
"""
import logging
import math

import numpy as np

from .. import config
from ..models import HRCandidate, SignalQuality

logger = logging.getLogger(__name__)


def _plausible(hr):
    low, high = config.HR_RANGE_BPM
    return hr is not None and low <= hr <= high

#<editor-fold desc="Perfusion">

# --------- Perfusion index (AC / DC x 100) ---------
def perfusion_index(signal):
    x = np.asarray(signal, dtype=float)
    if x.size == 0:
        return {"pi": 0.0, "dc": 0.0, "ac": 0.0, "is_valid": False}

    dc = float(np.mean(x))
    ac = float(np.max(x) - np.min(x)) / 2
    pi = ac / dc * 100 if dc > 0 else 0.0

    return {"pi": pi, "dc": dc, "ac": ac, "is_valid": pi >= config.PI_MIN_VALID}

#</editor-fold>

#<editor-fold desc="Heart-rate estimates">

# --------- HR from peak spacing ---------
def hr_time_domain(signal, fs=config.DEFAULT_SAMPLING_RATE_HZ):
    x = np.asarray(signal, dtype=float)
    if x.size < config.HR_TIME_MIN_SAMPLES or fs <= 0:
        return None

    x = x - np.mean(x)
    threshold = np.max(np.abs(x)) * config.HR_PEAK_THRESHOLD_FRAC
    inner = x[1:-1]
    peaks = np.flatnonzero((inner > x[:-2]) & (inner > x[2:]) & (inner > threshold)) + 1
    if peaks.size < 2:
        return None

    hr = 60.0 / (float(np.mean(np.diff(peaks))) / fs)
    return int(round(hr)) if _plausible(hr) else None

# --------- HR from the dominant frequency ---------
def hr_frequency_domain(signal, fs=config.DEFAULT_SAMPLING_RATE_HZ):
    x = np.asarray(signal, dtype=float)
    n = x.size
    if n < config.HR_FFT_MIN_SAMPLES or fs <= 0:
        return None

    fft_size = 2 ** math.ceil(math.log2(n))
    windowed = (x - np.mean(x)) * np.hamming(n)
    spectrum = np.abs(np.fft.rfft(windowed, n=fft_size))
    freqs = np.fft.rfftfreq(fft_size, d=1.0 / fs)

    low, high = config.HR_FFT_BAND_HZ
    in_band = np.where((freqs >= low) & (freqs <= high), spectrum, 0.0)
    k = int(np.argmax(in_band))
    if in_band[k] <= 0:
        return None

    hr = int(round(freqs[k] * 60))
    return hr if _plausible(hr) else None

# --------- Autocorrelation over plausible beat lags ---------
def _autocorrelation(signal, fs):
    x = np.asarray(signal, dtype=float)
    x = x - np.mean(x)
    n = x.size

    low_s, high_s = config.AUTOCORR_LAG_RANGE_S
    lags = np.arange(max(1, math.floor(fs * low_s)), min(math.ceil(n / 2), math.floor(fs * high_s)))
    corr = np.array([np.dot(x[:-lag], x[lag:]) / (n - lag) for lag in lags], dtype=float)

    return lags, corr

def hr_autocorrelation(signal, fs=config.DEFAULT_SAMPLING_RATE_HZ):
    x = np.asarray(signal, dtype=float)
    if x.size < config.AUTOCORR_MIN_SAMPLES or fs <= 0:
        return None

    lags, corr = _autocorrelation(x, fs)
    if lags.size == 0:
        return None

    hr = 60.0 * fs / int(lags[np.argmax(corr)])
    return int(round(hr)) if _plausible(hr) else None

#</editor-fold>

#<editor-fold desc="Quality scores">

# --------- Waveform periodicity (0-1) ---------
def waveform_periodicity(signal, fs=config.DEFAULT_SAMPLING_RATE_HZ):
    x = np.asarray(signal, dtype=float)
    if x.size < config.AUTOCORR_MIN_SAMPLES or fs <= 0:
        return 0.0

    lags, corr = _autocorrelation(x, fs)
    if corr.size < 3:
        return 0.0

    inner = corr[1:-1]
    idx = np.flatnonzero((inner > corr[:-2]) & (inner > corr[2:]) & (inner > 0)) + 1
    if idx.size < 2:
        return 0.0

    # steady spacing of autocorrelation peaks means a periodic waveform
    intervals = np.diff(lags[idx]).astype(float)
    mean = float(np.mean(intervals))
    cv = float(np.std(intervals)) / mean if mean > 0 else 1.0

    return max(0.0, 1.0 - cv)

# --------- SpO2 variability ---------
def spo2_variability(values):
    v = np.asarray([np.nan if s is None else s for s in values], dtype=float)
    v = v[np.isfinite(v) & (v > 0)]
    if v.size < 2:
        return 0.0
    return float(np.std(v))

# --------- SQI of one heart-rate estimate ---------
def signal_quality_index(pi, hr, candidates=None, previous_hr=None,
                         spo2_var=None, periodicity=None):
    sqi = 0.0

    if pi >= config.PI_GOOD:
        sqi += 0.3
    elif pi >= config.PI_MIN_VALID:
        sqi += 0.15

    if _plausible(hr):
        sqi += 0.2

    if candidates is not None and len(candidates) > 1:
        valid = [c for c in candidates if _plausible(c)]
        if valid:
            spread = float(np.std(valid))
            if spread < 10:
                sqi += 0.2
            elif spread < 20:
                sqi += 0.1

    if periodicity is not None:
        sqi += periodicity * 0.15

    if previous_hr and hr:
        change = abs(hr - previous_hr) / previous_hr
        if change < 0.25:
            sqi += 0.1
        elif change < 0.5:
            sqi += 0.05

    if spo2_var is not None:
        if spo2_var < 2:
            sqi += 0.05
        elif spo2_var < 5:
            sqi += 0.025

    # the factor weights add up to 1
    return min(1.0, sqi)

def quality_status(sqi, pi):
    if sqi >= config.SQI_GOOD and pi >= config.PI_GOOD:
        return "normal"
    if sqi >= config.SQI_FAIR or pi >= config.PI_MIN_VALID:
        return "low_quality"
    return "reposition_needed"

#</editor-fold>

#<editor-fold desc="Fusion">

def _valid_candidates(candidates):
    return [(v, w) for v, w in candidates if v is not None and w > 0 and _plausible(v)]

# --------- Weighted median of (value, weight) pairs ---------
def weighted_median(candidates):
    valid = sorted(_valid_candidates(candidates), key=lambda c: c[0])
    if not valid:
        return None

    half = sum(w for _, w in valid) / 2
    cumulative = 0.0
    for value, weight in valid:
        cumulative += weight
        if cumulative >= half:
            return int(round(value))

    return int(round(valid[-1][0]))

# --------- Weighted majority vote ---------
def majority_vote(candidates):
    groups = {}
    for value, weight in _valid_candidates(candidates):
        key = int(round(value))
        groups[key] = groups.get(key, 0.0) + weight

    best, best_weight = None, 0.0
    for value, weight in groups.items():
        if weight > best_weight:
            best, best_weight = value, weight

    return best

#</editor-fold>

#<editor-fold desc="MAIN">

def assess_signal_quality(signal, fs=config.DEFAULT_SAMPLING_RATE_HZ, spo2=None, previous_hr=None):
    x = np.asarray(signal, dtype=float)

    pi = perfusion_index(x)
    base = {"perfusion_index": pi["pi"], "dc": pi["dc"], "ac": pi["ac"], "pi_valid": pi["is_valid"]}
    if not pi["is_valid"]:
        logger.debug("Perfusion index %.3f below %.1f, no heart-rate estimate", pi["pi"], config.PI_MIN_VALID)
        return SignalQuality(**base, status="low_pi")

    estimates = [
        ("time_domain", hr_time_domain(x, fs)),
        ("frequency_domain", hr_frequency_domain(x, fs)),
        ("autocorrelation", hr_autocorrelation(x, fs)),
    ]
    if _plausible(previous_hr):
        estimates.append(("prediction", int(previous_hr)))
    estimates = [(method, hr) for method, hr in estimates if hr is not None]

    periodicity = waveform_periodicity(x, fs)
    spo2_var = spo2_variability(spo2 if spo2 is not None else [])
    base.update(waveform_periodicity=periodicity, spo2_variability=spo2_var)

    values = [hr for _, hr in estimates]
    candidates = tuple(
        HRCandidate(method=method, value=hr,
                    sqi=signal_quality_index(pi["pi"], hr, values, previous_hr=previous_hr,
                                             spo2_var=spo2_var, periodicity=periodicity))
        for method, hr in estimates
    )

    heart_rate = weighted_median([(c.value, c.sqi) for c in candidates])
    if heart_rate is None:
        logger.debug("No plausible heart-rate estimate in %d samples", x.size)
        return SignalQuality(**base, candidates=candidates, status="no_hr")

    sqi = float(np.mean([c.sqi for c in candidates]))
    return SignalQuality(**base, candidates=candidates, heart_rate=heart_rate,
                         sqi=sqi, status=quality_status(sqi, pi["pi"]))

#</editor-fold>
