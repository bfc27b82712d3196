"""
Shared constants used across multiple modules.
Single source of truth for metric types and interpretation thresholds.
"""

# Trackable item data types (trackable_items.type)
SCALE_1_10 = "SCALE_1_10"
NUMERIC = "NUMERIC"
BOOLEAN = "BOOLEAN"
TEXT = "TEXT"
METRIC_TYPES = {SCALE_1_10, NUMERIC, BOOLEAN, TEXT}

# Pearson needs at least two paired observations
MIN_PAIRED_OBSERVATIONS = 2

# Correlation strength labels: |r| > STRONG, |r| >= MODERATE, else weak
STRONG_CORRELATION = 0.6
MODERATE_CORRELATION = 0.3

# Relationship-story widget: r beyond +/- this reads as a real pattern
STORY_THRESHOLD = 0.3

# Point-difference labels for breakdown / experiment impact
STRONG_IMPACT = 2.0
MODERATE_IMPACT = 1.0
WEAK_IMPACT = 0.5

# Consistency analysis counts runs of at least this many days
MIN_STREAK_DAYS = 3

# On a 1-10 scale, values above this count as the "high" condition
SCALE_POSITIVE_CUTOFF = 5
