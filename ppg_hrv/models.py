"""
Data contracts for the HRV pipeline.

Every model is frozen: a result is built once per analysis and replaced
wholesale on the next one.
"""
from __future__ import annotations

from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class RawSample(BaseModel):
    """One telemetry row from the wearable. Only ``ir`` is analysed."""

    model_config = ConfigDict(frozen=True)

    ir: Optional[float] = None
    red: Optional[float] = None
    green: Optional[float] = None
    spo2: Optional[float] = None
    hr: Optional[float] = None
    temp: Optional[float] = None
    battery: Optional[float] = None
    timestamp: Optional[int] = Field(default=None, description="Epoch milliseconds.")
    start_time: Optional[int] = Field(default=None, description="Epoch milliseconds of the batch start.")
    device_mac_address: Optional[str] = None


class HRVMetrics(BaseModel):
    """Time, frequency and nonlinear HRV metrics of one RR series."""

    model_config = ConfigDict(frozen=True)

    mean_rr: float
    bpm: float
    sdnn: float
    rmssd: float
    pnn50: float
    lf: float
    hf: float
    lf_hf_ratio: float
    sd1: float
    sd2: float
    ellipse_area: float
    sample_entropy: float


class StressIndices(BaseModel):
    """Stress indices derived from an HRVMetrics instance."""

    model_config = ConfigDict(frozen=True)

    stress_index: float
    ans_balance: float
    hrv_index: float
    stress_resistance: float
    hr_stability: float
    recovery_index: float
    activation_index: float
    relaxation_index: float
    overall_stress_score: float = Field(ge=0.0, le=100.0)
    stress_level: int = Field(ge=1, le=5)


class PoincarePoint(BaseModel):

    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class HRCandidate(BaseModel):
    """One heart-rate estimate and the quality index it was given."""

    model_config = ConfigDict(frozen=True)

    method: str
    value: int
    sqi: float = 0.0


class SignalQuality(BaseModel):
    """Quality of one IR batch: perfusion, periodicity and fused heart rate.

    ``status`` is one of ``normal``, ``low_quality``, ``reposition_needed``,
    ``low_pi`` (perfusion too low to estimate anything) or ``no_hr`` (no
    estimator produced a plausible rate).
    """

    model_config = ConfigDict(frozen=True)

    perfusion_index: float
    dc: float
    ac: float
    pi_valid: bool
    waveform_periodicity: float = 0.0
    spo2_variability: float = 0.0
    candidates: Tuple[HRCandidate, ...] = ()
    heart_rate: Optional[int] = None
    sqi: float = Field(default=0.0, ge=0.0, le=1.0)
    status: str


class HRVAnalysis(BaseModel):
    """Output of one pipeline run.

    ``metrics`` and ``stress_indices`` are None when the input did not hold
    enough data, so "not enough data yet" stays distinguishable from a
    computed zero.
    """

    model_config = ConfigDict(frozen=True)

    peaks: Tuple[int, ...] = ()
    rr_series: Tuple[float, ...] = ()
    metrics: Optional[HRVMetrics] = None
    poincare_points: Tuple[PoincarePoint, ...] = ()
    stress_indices: Optional[StressIndices] = None
    quality: Optional[SignalQuality] = None

    @property
    def has_metrics(self) -> bool:
        return self.metrics is not None
