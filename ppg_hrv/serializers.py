import math

from .models import HRVAnalysis, HRVMetrics, SignalQuality, StressIndices

METRIC_FIELDS = tuple(HRVMetrics.model_fields)
STRESS_FIELDS = tuple(StressIndices.model_fields)

QUALITY_FIELDS = ("perfusion_index", "waveform_periodicity", "sqi", "quality_hr", "signal_status")

METRIC_COLUMNS = ("peak_count", "rr_count") + METRIC_FIELDS + STRESS_FIELDS + QUALITY_FIELDS


def _clean(v):
    if v is None:
        return None
    if isinstance(v, float) and not math.isfinite(v):
        return None
    return v


def metrics_row(metrics: HRVMetrics | None):
    if metrics is None:
        return {k: None for k in METRIC_FIELDS}
    return {k: _clean(float(v)) for k, v in metrics.model_dump().items()}


def stress_row(indices: StressIndices | None):
    if indices is None:
        return {k: None for k in STRESS_FIELDS}
    row = {k: _clean(float(v)) for k, v in indices.model_dump().items()}
    row["stress_level"] = indices.stress_level
    return row


def quality_row(quality: SignalQuality | None):
    if quality is None:
        return {k: None for k in QUALITY_FIELDS}
    return {
        "perfusion_index": _clean(quality.perfusion_index),
        "waveform_periodicity": _clean(quality.waveform_periodicity),
        "sqi": _clean(quality.sqi),
        "quality_hr": quality.heart_rate,
        "signal_status": quality.status,
    }


def analysis_row(analysis: HRVAnalysis):
    return {
        "peak_count": len(analysis.peaks),
        "rr_count": len(analysis.rr_series),
        **metrics_row(analysis.metrics),
        **stress_row(analysis.stress_indices),
        **quality_row(analysis.quality),
    }


def rr_rows(analysis: HRVAnalysis):
    return [{"index": i + 1, "rr": rr} for i, rr in enumerate(analysis.rr_series)]


def poincare_rows(analysis: HRVAnalysis):
    return [{"x": p.x, "y": p.y} for p in analysis.poincare_points]
