from .analysis import analyze, analyze_recording, analyze_samples, analyze_windows
from .models import HRCandidate, HRVAnalysis, HRVMetrics, PoincarePoint, RawSample, SignalQuality, StressIndices

__all__ = [
    "analyze",
    "analyze_recording",
    "analyze_samples",
    "analyze_windows",
    "HRCandidate",
    "HRVAnalysis",
    "HRVMetrics",
    "PoincarePoint",
    "RawSample",
    "SignalQuality",
    "StressIndices",
]
