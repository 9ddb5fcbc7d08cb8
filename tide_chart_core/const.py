"""Constants for Tide Chart Core (validation, fallback and scale)."""

# Library identity
DOMAIN = "tide_chart_core"
DEFAULT_NAME = "Tide Chart Core"

# Valid tide level range (metres)
MIN_TIDE_M = -3.0
MAX_TIDE_M = 5.0

# Strict mode: maximum decimals allowed on a level value (millimetre resolution)
MAX_LEVEL_DECIMALS = 3

# Warning thresholds
BOUNDARY_WARNING_THRESHOLD_M = 0.1  # distance from MIN/MAX_TIDE_M that triggers a warning
MAX_GAP_HOURS = 6.0
MAX_GAP_HOURS_STRICT = 3.0

# Timeout checkpoints inside the per-sample loop (every N samples)
DEFAULT_TIMEOUT_CHECK_EVERY = 500

# Severity ordering used for sorting (lower ranks first)
SEVERITY_RANK = {
    "critical": 0,
    "error": 1,
    "warning": 2,
}

# Fallback policy thresholds (validity percentage)
FALLBACK_NONE_FROM_PCT = 80.0
FALLBACK_PARTIAL_FROM_PCT = 50.0
FALLBACK_SIMPLE_FROM_PCT = 20.0

# Error display
DEFAULT_LOCALE = "ja"
SUPPORTED_LOCALES = ("ja", "en")
DEFAULT_MAX_MESSAGE_LENGTH = 500
MANY_ERRORS_THRESHOLD = 1000

# ----- Scale calculation (all levels in centimetres) -----
SCALE_UNIT = "cm"
DEFAULT_MARGIN_RATIO = 0.15
DEFAULT_PREFERRED_INTERVALS = [10, 25, 50, 100, 200]
DEFAULT_MAX_TICKS = 4
DEFAULT_MIN_TICKS = 3
DEFAULT_TARGET_TICK_COUNT = 4
DISPLAY_MARGIN_MULTIPLIER = 1.3
MEAN_SEA_LEVEL_BAND_CM = 100.0  # +/- 1 m around mean sea level
TICK_DECIMALS = 2
CACHE_KEY_DECIMALS = 9  # decimals kept per level in the cache key
DEFAULT_SCALE_CACHE_SIZE = 100

# Single-value data: symmetric range around the value
SINGLE_VALUE_MIN_HALF_RANGE_CM = 100.0
SINGLE_VALUE_RELATIVE_HALF_RANGE = 0.5
SINGLE_VALUE_INTERVAL_CM = 50

# Empty / fully invalid data
DEFAULT_SCALE = {
    "min": -200,
    "max": 200,
    "interval": 100,
    "ticks": [-200, -100, 0, 100, 200],
    "unit": SCALE_UNIT,
}

# Interval classification used by the detailed scale report
INTERVAL_FINE_MAX = 25
INTERVAL_STANDARD_MAX = 100
