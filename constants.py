"""
Ultra State analytics defaults.

Every threshold used by the analysis components lives here so that the
settings dataclasses and the module-level helpers agree on one value.
All quantities are SI: seconds, meters, meters/second, beats/minute.
"""

# ── Hill peaks ───────────────────────────────────────────────────────────────
MIN_VALID_SAMPLES = 20          # altitude + HR samples needed for peak detection
PEAK_WINDOW_SEC = 60.0          # candidate must be highest within +/- 60 s
PROMINENCE_WINDOW_SEC = 300.0   # look 5 min ahead for the post-summit low point
MIN_PROMINENCE_M = 15.0
MIN_PEAK_SPACING_SEC = 120.0

# ── HR recovery ──────────────────────────────────────────────────────────────
RECOVERY_OFFSETS_SEC = (60, 120, 300)
RECOVERY_TOLERANCE_SEC = 15.0

# Recovery quality buckets (bpm dropped)
RECOVERY_GOOD_BPM = 20
RECOVERY_MODERATE_BPM = 10

# ── Charts ───────────────────────────────────────────────────────────────────
ELEVATION_CHART_POINTS = 300
PACE_CHART_POINTS = 300
PEAK_PROFILE_POINTS = 200
HR_TIMELINE_POINTS = 500

ESTIMATOR_WINDOW = 5            # samples on each side of the centre point
VERTICAL_RATE_LIMIT = 2000.0    # m/h, clamps barometer noise spikes
MIN_RATE_TIME_SPAN_SEC = 3.6    # 0.001 h; shorter spans report a zero rate
SECONDS_PER_HOUR = 3600.0

PACE_DISTANCE_M = 1000.0        # pace is reported as seconds per kilometre
MIN_MOVING_SPEED = 0.1          # m/s; at or below this the athlete is stationary
MAX_PACE_SEC = 1200.0           # 20 min per pace unit, chart readability cap
STATIONARY_PACE = 0.0           # sentinel, never a computed pace

# ── Payload ──────────────────────────────────────────────────────────────────
ANALYSIS_PAYLOAD_VERSION = 1
