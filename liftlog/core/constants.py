"""Application constants."""

# Set input limits
MAX_REPS = 1000
MAX_WEIGHT = 10000
MAX_REST_SECONDS = 7200  # 2 hours

# Brzycki formula is only valid up to this many reps
BRZYCKI_MAX_REPS = 36

# Streaks: consecutive sessions at most this many days apart
STREAK_GAP_DAYS = 7

# Trend classification: relative change first -> last
TREND_THRESHOLD = 0.05
