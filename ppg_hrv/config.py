"""
Tunable constants for the HRV pipeline.

Retry limits and bands are kept at the values the device firmware and the
HRV views were calibrated against.
"""
import os

# --------- Acquisition ---------
DEFAULT_SAMPLING_RATE_HZ = 100.0
MIN_VALID_SAMPLES = 10

# --------- Peak detection ---------
PEAK_THRESHOLD_STD = 0.5
PEAK_RETRY_THRESHOLD_STD = 0.2
PEAK_MIN_DISTANCE_S = 0.4
PEAK_RETRY_BELOW = 10

# --------- RR intervals (ms) ---------
RR_BAND_MS = (300.0, 2000.0)
RR_RETRY_BAND_MS = (200.0, 3000.0)
RR_RETRY_BELOW = 5
MIN_RR_INTERVALS = 2
NN50_THRESHOLD_MS = 50.0

# --------- Frequency domain ---------
RESAMPLE_HZ = 4.0
MIN_RR_FOR_SPECTRUM = 10
LF_BAND = (0.04, 0.15)
HF_BAND = (0.15, 0.40)

# --------- Sample entropy ---------
SAMPEN_M = 2
SAMPEN_R = 0.2

# --------- Signal quality ---------
PI_MIN_VALID = 0.3
PI_GOOD = 0.6
HR_RANGE_BPM = (40, 200)
HR_PEAK_THRESHOLD_FRAC = 0.3
HR_TIME_MIN_SAMPLES = 10
HR_FFT_MIN_SAMPLES = 32
HR_FFT_BAND_HZ = (0.67, 3.33)
AUTOCORR_MIN_SAMPLES = 20
AUTOCORR_LAG_RANGE_S = (0.3, 2.0)
SQI_GOOD = 0.7
SQI_FAIR = 0.5

# --------- Windowed analysis ---------
WINDOW_SECONDS = 30.0
WINDOW_STEP_SECONDS = 10.0

# --------- Timestamps ---------
TIME_ZONE = os.environ.get("PPG_HRV_TIME_ZONE", "UTC")
