"""
Reference ranges and status labels for HRV metrics and stress indices.

Ranges are the ones the HRV detail views show next to each value: a
``normal`` band, a wider ``caution`` band, anything outside is
``abnormal``.
"""
import math

import matplotlib.colors as mcolors

from .models import HRVMetrics, StressIndices

STATUS_COLORS = {
    "normal": "#4CAF50",
    "caution": "#FF9800",
    "abnormal": "#F44336",
}

# (normal min, normal max), (caution min, caution max), unit
METRIC_RANGES = {
    "mean_rr": {"normal": (600, 1200), "caution": (500, 1400), "unit": "ms"},
    "bpm": {"normal": (60, 100), "caution": (50, 120), "unit": "BPM"},
    "sdnn": {"normal": (20, 100), "caution": (15, 150), "unit": "ms"},
    "rmssd": {"normal": (15, 80), "caution": (10, 120), "unit": "ms"},
    "pnn50": {"normal": (3, 30), "caution": (1, 50), "unit": "%"},
    "lf": {"normal": (1000, 10000000), "caution": (500, 50000000), "unit": "ms²"},
    "hf": {"normal": (500, 5000000), "caution": (250, 25000000), "unit": "ms²"},
    "lf_hf_ratio": {"normal": (0.5, 3.0), "caution": (0.2, 5.0), "unit": ""},
    "sd1": {"normal": (10, 60), "caution": (5, 100), "unit": "ms"},
    "sd2": {"normal": (20, 100), "caution": (10, 150), "unit": "ms"},
    "ellipse_area": {"normal": (200, 10000), "caution": (100, 50000), "unit": "ms²"},
    "sample_entropy": {"normal": (0.8, 2.0), "caution": (0.5, 2.5), "unit": ""},
}

STRESS_RANGES = {
    "stress_index": {"normal": (5, 20), "caution": (3, 30), "unit": ""},
    "ans_balance": {"normal": (0.5, 3.0), "caution": (0.2, 5.0), "unit": ""},
    "hrv_index": {"normal": (15, 80), "caution": (10, 120), "unit": "ms"},
    "stress_resistance": {"normal": (1, 5), "caution": (0.5, 8), "unit": ""},
    "hr_stability": {"normal": (5, 20), "caution": (3, 30), "unit": ""},
    "recovery_index": {"normal": (3, 30), "caution": (1, 50), "unit": "%"},
    "activation_index": {"normal": (0.5, 3.0), "caution": (0.2, 5.0), "unit": ""},
    "relaxation_index": {"normal": (5, 15), "caution": (3, 20), "unit": ""},
    "overall_stress_score": {"normal": (0, 40), "caution": (0, 60), "unit": "pts"},
}

STRESS_LEVELS = {
    1: {"text": "very low", "color": "#4CAF50"},
    2: {"text": "low", "color": "#8BC34A"},
    3: {"text": "moderate", "color": "#FF9800"},
    4: {"text": "high", "color": "#FF5722"},
    5: {"text": "very high", "color": "#F44336"},
}

# expected direction of each metric under stress, relative to a relaxed baseline
DECREASE_METRICS = ("mean_rr", "sdnn", "rmssd", "pnn50", "lf", "hf",
                    "sd1", "sd2", "ellipse_area", "sample_entropy")
INCREASE_METRICS = ("bpm", "lf_hf_ratio")

_stress_cmap = mcolors.LinearSegmentedColormap.from_list("stress_scale", ["#00b050", "#ffff00", "#ff0000"])


def classify(value, ranges):
    normal_min, normal_max = ranges["normal"]
    caution_min, caution_max = ranges["caution"]
    if normal_min <= value <= normal_max:
        status = "normal"
    elif caution_min <= value <= caution_max:
        status = "caution"
    else:
        status = "abnormal"
    return {"status": status, "color": STATUS_COLORS[status], "unit": ranges["unit"]}


def interpret_metrics(metrics: HRVMetrics):
    values = metrics.model_dump()
    return {k: {"value": values[k], **classify(values[k], r)} for k, r in METRIC_RANGES.items()}


def interpret_stress(indices: StressIndices):
    values = indices.model_dump()
    return {k: {"value": values[k], **classify(values[k], r)} for k, r in STRESS_RANGES.items()}


def stress_level_label(level):
    return STRESS_LEVELS.get(level, STRESS_LEVELS[3])


def stress_score_color(score):
    score = min(100.0, max(0.0, float(score)))
    return mcolors.to_hex(_stress_cmap(score / 100))


def _usable(v):
    return v is not None and isinstance(v, (int, float)) and math.isfinite(v) and v != 0


def compare_to_baseline(row, baseline):
    result = {}
    for m in DECREASE_METRICS + INCREASE_METRICS:
        val, base = row.get(m), baseline.get(m)
        if not (_usable(val) and _usable(base)):
            continue
        moved_as_expected = val < base if m in DECREASE_METRICS else val > base
        result[m] = "expected" if moved_as_expected else "unexpected"
    return result
