import logging
import math

import numpy as np

from .. import config

logger = logging.getLogger(__name__)

#<editor-fold desc="Signal cleaning">

# --------- IR signal cleaning ---------
def clean_ir_signal(samples):
    ir = np.asarray(samples, dtype=float)
    if ir.ndim != 1:
        ir = ir.ravel()
    ir = ir[np.isfinite(ir)]
    ir = ir[ir > 0.0]

    return ir

#</editor-fold>

#<editor-fold desc="Peak detection">

# --------- Single threshold scan ---------
def _scan_peaks(signal, threshold, min_distance):
    inner = signal[1:-1]
    candidates = np.flatnonzero(
        (inner > threshold) & (inner > signal[:-2]) & (inner > signal[2:])
    ) + 1

    peaks = []
    for i in candidates:
        if not peaks or i - peaks[-1] > min_distance:
            peaks.append(int(i))

    return peaks

# --------- Adaptive peak detection ---------
def detect_peaks(signal, fs=config.DEFAULT_SAMPLING_RATE_HZ):
    signal = np.asarray(signal, dtype=float)
    if signal.size < 3:
        return []

    mu = float(np.mean(signal))
    sigma = float(np.std(signal))
    min_distance = math.floor(fs * config.PEAK_MIN_DISTANCE_S)

    peaks = _scan_peaks(signal, mu + config.PEAK_THRESHOLD_STD * sigma, min_distance)

    # too few beats at the strict threshold, rescan lower and keep whatever it finds
    if len(peaks) < config.PEAK_RETRY_BELOW:
        primary = len(peaks)
        peaks = _scan_peaks(signal, mu + config.PEAK_RETRY_THRESHOLD_STD * sigma, min_distance)
        logger.debug("Peak rescan at lowered threshold: %d -> %d peaks", primary, len(peaks))

    return peaks

#</editor-fold>

#<editor-fold desc="RR intervals">

# --------- RR intervals within a band ---------
def _intervals_in_band(peaks, fs, band):
    if len(peaks) < 2:
        return np.empty(0, dtype=float)
    intervals = np.diff(np.asarray(peaks, dtype=float)) * (1000.0 / fs)
    low, high = band
    return intervals[(intervals >= low) & (intervals <= high)]

# --------- RR extraction with band fallback ---------
def extract_rr_intervals(peaks, fs=config.DEFAULT_SAMPLING_RATE_HZ):
    if len(peaks) < 2:
        return np.empty(0, dtype=float)

    rr = _intervals_in_band(peaks, fs, config.RR_BAND_MS)

    if rr.size < config.RR_RETRY_BELOW:
        strict = rr.size
        rr = _intervals_in_band(peaks, fs, config.RR_RETRY_BAND_MS)
        logger.debug("RR extraction widened to %s ms: %d -> %d intervals",
                     config.RR_RETRY_BAND_MS, strict, rr.size)

    return rr

#</editor-fold>
