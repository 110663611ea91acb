"""
Entry points of the HRV engine.

``analyze`` runs the whole pipeline on one batch of raw IR samples:
peak detection, RR extraction, time/frequency/nonlinear metrics, the
stress composite and a signal-quality record of the same batch. It keeps
no state between calls; callers re-run it on the full buffer whenever new
samples arrive and replace the previous result.
"""
import logging
import math

from . import config
from .models import HRVAnalysis
from .serializers import analysis_row
from .utils.hrv import compose_stress_indices, compute_hrv_metrics, poincare_points
from .utils.parsers import read_samples
from .utils.peaks import clean_ir_signal, detect_peaks, extract_rr_intervals
from .utils.quality import assess_signal_quality

logger = logging.getLogger(__name__)


def _check_sampling_rate(fs):
    try:
        fs = float(fs)
    except (TypeError, ValueError):
        raise ValueError(f"sampling_rate_hz must be a number, got {fs!r}") from None
    if not math.isfinite(fs) or fs <= 0:
        raise ValueError(f"sampling_rate_hz must be positive and finite, got {fs}")
    return fs


#<editor-fold desc="Pipeline">

def analyze(raw_samples, sampling_rate_hz=config.DEFAULT_SAMPLING_RATE_HZ, spo2=None) -> HRVAnalysis:
    fs = _check_sampling_rate(sampling_rate_hz)

    signal = clean_ir_signal(raw_samples)
    if signal.size < config.MIN_VALID_SAMPLES:
        logger.debug("Insufficient data: %d valid IR samples", signal.size)
        return HRVAnalysis()

    quality = assess_signal_quality(signal, fs, spo2=spo2)

    peaks = detect_peaks(signal, fs)
    if len(peaks) < 2:
        logger.debug("Insufficient data: %d peaks in %d samples", len(peaks), signal.size)
        return HRVAnalysis(peaks=tuple(peaks), quality=quality)

    rr = extract_rr_intervals(peaks, fs)
    rr_series = tuple(float(v) for v in rr)
    if rr.size < config.MIN_RR_INTERVALS:
        logger.debug("Insufficient data: %d RR intervals from %d peaks", rr.size, len(peaks))
        return HRVAnalysis(peaks=tuple(peaks), rr_series=rr_series, quality=quality)

    metrics = compute_hrv_metrics(rr)

    return HRVAnalysis(
        peaks=tuple(peaks),
        rr_series=rr_series,
        metrics=metrics,
        poincare_points=tuple(poincare_points(rr)),
        stress_indices=compose_stress_indices(metrics),
        quality=quality,
    )


def analyze_samples(samples, sampling_rate_hz=config.DEFAULT_SAMPLING_RATE_HZ) -> HRVAnalysis:
    samples = list(samples)
    return analyze([s.ir for s in samples], sampling_rate_hz, spo2=[s.spo2 for s in samples])


def analyze_recording(source, sampling_rate_hz=config.DEFAULT_SAMPLING_RATE_HZ) -> HRVAnalysis:
    return analyze_samples(read_samples(source), sampling_rate_hz)

#</editor-fold>

#<editor-fold desc="Windowed analysis">

def sliding_windows(data, window_size, step):
    n = len(data)
    if n == 0:
        return

    start = 0
    last_end = 0
    while start + window_size <= n:
        end = start + window_size
        yield start, end, data[start:end]
        last_end = end
        start += step

    # Handle remaining tail
    if last_end < n:
        end = n
        start = max(0, n - window_size)
        yield start, end, data[start:end]


def analyze_windows(raw_samples, sampling_rate_hz=config.DEFAULT_SAMPLING_RATE_HZ,
                    window_seconds=config.WINDOW_SECONDS, step_seconds=config.WINDOW_STEP_SECONDS):
    fs = _check_sampling_rate(sampling_rate_hz)
    window_size = int(round(window_seconds * fs))
    step = int(round(step_seconds * fs))
    if window_size < 1 or step < 1:
        raise ValueError("window_seconds and step_seconds must cover at least one sample")

    data = list(raw_samples)
    rows = []
    for start, end, window in sliding_windows(data, window_size=window_size, step=step):
        row = {
            "window_start": start + 1,
            "window_end": end,
            **analysis_row(analyze(window, fs)),
        }
        rows.append(row)

    logger.debug("Analysed %d windows of %d samples over %d samples", len(rows), window_size, len(data))
    return rows

#</editor-fold>
