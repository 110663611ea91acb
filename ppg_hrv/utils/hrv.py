import logging
import math

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from .. import config
from ..models import HRVMetrics, PoincarePoint, StressIndices

logger = logging.getLogger(__name__)

#<editor-fold desc="Time domain">

############################################################### Time domain

# --------- Mean RR ---------
def compute_mean_rr(rr_list):
    return float(np.mean(rr_list))

# --------- Mean HR from RR ---------
def compute_bpm(rr_list):
    return 60000.0 / compute_mean_rr(rr_list)

# --------- SDNN ---------
def compute_sdnn(rr_list):
    return float(np.std(rr_list, ddof=1))

# --------- RMSSD ---------
def compute_rmssd(rr_list):
    return float(np.sqrt(np.mean(np.square(np.diff(rr_list)))))

# --------- pNN50 ---------
def compute_pnn50(rr_list, threshold_ms=config.NN50_THRESHOLD_MS):
    diff = np.diff(rr_list)
    return float(100.0 * np.count_nonzero(np.abs(diff) > threshold_ms) / diff.size)

def compute_time_domain(rr_list):
    rr = np.asarray(rr_list, dtype=float)
    if rr.size < config.MIN_RR_INTERVALS:
        return None

    return {
        "mean_rr": compute_mean_rr(rr),
        "bpm": compute_bpm(rr),
        "sdnn": compute_sdnn(rr),
        "rmssd": compute_rmssd(rr),
        "pnn50": compute_pnn50(rr),
    }

#</editor-fold>

#<editor-fold desc="Frequency domain">

############################################################### Frequency domain

# --------- Zero-order hold resampling ---------
def resample_rr_series(rr_list, fs=config.RESAMPLE_HZ):
    rr = np.asarray(rr_list, dtype=float)
    duration = float(np.sum(rr)) / 1000.0
    n = math.floor(duration * fs)
    if n <= 0:
        return np.empty(0, dtype=float)

    # elapsed[j] is the time reached after consuming j intervals
    elapsed = np.concatenate(([0.0], np.cumsum(rr / 1000.0)))
    targets = np.arange(n) / fs
    reached = np.minimum(np.searchsorted(elapsed, targets, side="left"), rr.size)

    held = np.zeros(n, dtype=float)
    has_value = reached > 0
    held[has_value] = rr[reached[has_value] - 1]

    return held

# --------- Band power from the DFT magnitude spectrum ---------
def spectral_band_powers(series, fs=config.RESAMPLE_HZ,
                         lf_band=config.LF_BAND,
                         hf_band=config.HF_BAND):
    x = np.asarray(series, dtype=float)
    n = x.size
    if n == 0:
        return 0.0, 0.0

    power = np.abs(np.fft.fft(x)) ** 2
    freqs = np.arange(n) * fs / n

    lf = float(np.sum(power[(freqs >= lf_band[0]) & (freqs <= lf_band[1])]))
    hf = float(np.sum(power[(freqs >= hf_band[0]) & (freqs <= hf_band[1])]))

    return lf, hf

def compute_frequency_domain(rr_list, fs=config.RESAMPLE_HZ):
    rr = np.asarray(rr_list, dtype=float)
    if rr.size < config.MIN_RR_FOR_SPECTRUM:
        return {"lf": 0.0, "hf": 0.0, "lf_hf_ratio": 0.0}

    lf, hf = spectral_band_powers(resample_rr_series(rr, fs=fs), fs=fs)
    lf_hf_ratio = lf / hf if hf > 0 else 0.0

    return {"lf": lf, "hf": hf, "lf_hf_ratio": lf_hf_ratio}

#</editor-fold>

#<editor-fold desc="Nonlinear">

############################################################### Nonlinear

# --------- Poincare SD1 / SD2 ---------
def compute_poincare(rr_list):
    rr = np.asarray(rr_list, dtype=float)
    if rr.size < 2:
        return {"sd1": 0.0, "sd2": 0.0, "ellipse_area": 0.0}

    rr1, rr2 = rr[:-1], rr[1:]
    sd1 = float(np.std(rr2 - rr1) / math.sqrt(2.0))
    sd2 = float(np.std(rr2 + rr1) / math.sqrt(2.0))

    return {"sd1": sd1, "sd2": sd2, "ellipse_area": math.pi * sd1 * sd2}

def poincare_points(rr_list):
    rr = [float(v) for v in rr_list]
    return [PoincarePoint(x=x, y=y) for x, y in zip(rr[:-1], rr[1:])]

# --------- Template matches for SampEn ---------
def count_matches(rr_list, length, tolerance):
    rr = np.asarray(rr_list, dtype=float)
    if rr.size < length:
        return 0

    emb = sliding_window_view(rr, length)  # shape: (N-length+1, length)

    # one template against all later ones per row
    count = 0
    for i in range(emb.shape[0] - 1):
        dist = np.max(np.abs(emb[i + 1:] - emb[i]), axis=1)
        count += int(np.count_nonzero(dist <= tolerance))

    return count

# --------- Sample Entropy ---------
def compute_sample_entropy(rr_list, m=config.SAMPEN_M, r=config.SAMPEN_R):
    rr = np.asarray(rr_list, dtype=float)
    if rr.size < m + 1:
        return 0.0

    tolerance = r * float(np.std(rr))
    phi_m = count_matches(rr, m, tolerance)
    phi_m1 = count_matches(rr, m + 1, tolerance)

    if phi_m == 0:
        return 0.0
    if phi_m1 == 0:
        logger.debug("No %d-length template matches out of %d; sample entropy is infinite", m + 1, phi_m)
        return math.inf

    return -math.log(phi_m1 / phi_m)

def compute_nonlinear(rr_list):
    result = compute_poincare(rr_list)
    result["sample_entropy"] = compute_sample_entropy(rr_list)
    return result

#</editor-fold>

#<editor-fold desc="Stress">

############################################################### Stress

def stress_level_for_score(score):
    if score < 20:
        return 1
    if score < 40:
        return 2
    if score < 60:
        return 3
    if score < 80:
        return 4
    return 5

def compose_stress_indices(metrics: HRVMetrics) -> StressIndices:
    sdnn, rmssd, hf = metrics.sdnn, metrics.rmssd, metrics.hf

    stress_index = 1000.0 / sdnn if sdnn > 0 else 0.0
    ans_balance = metrics.lf_hf_ratio
    stress_resistance = 100.0 / rmssd if rmssd > 0 else 0.0
    recovery_index = metrics.pnn50

    score = (stress_index * 0.3
             + ans_balance * 10 * 0.2
             + stress_resistance * 0.2
             + (100.0 - recovery_index) * 0.3)
    score = min(100.0, max(0.0, score))

    return StressIndices(
        stress_index=stress_index,
        ans_balance=ans_balance,
        hrv_index=rmssd,
        stress_resistance=stress_resistance,
        hr_stability=metrics.mean_rr / sdnn if sdnn > 0 else 0.0,
        recovery_index=recovery_index,
        activation_index=metrics.lf_hf_ratio,
        relaxation_index=math.log(hf) if hf > 0 else 0.0,
        overall_stress_score=score,
        stress_level=stress_level_for_score(score),
    )

#</editor-fold>

#<editor-fold desc="Main">

############################################################### MAIN

# --------- All HRV metrics of an RR series ---------
def compute_hrv_metrics(rr_list):
    rr = np.asarray(rr_list, dtype=float)

    time_domain = compute_time_domain(rr)
    if time_domain is None:
        return None

    return HRVMetrics(
        **time_domain,
        **compute_frequency_domain(rr),
        **compute_nonlinear(rr),
    )

#</editor-fold>
