"""Constants shared by the item analysis and flagging engines."""

# Label used for the blank-answer bucket in distractor analysis
OMITTED_LABEL = "Omitted"

# Kelley's upper/lower group fraction for the discrimination index
DISCRIMINATION_GROUP_FRACTION = 0.27

# Below this many responses the chi-square approximation is flagged
SMALL_SAMPLE_THRESHOLD = 30

# Minimum expected cell count for the chi-square approximation
MIN_EXPECTED_FREQUENCY = 5.0

# Flagging probabilities are never reported as certain
MAX_PROBABILITY = 0.999

# Floor for the class average so the score component stays finite
MIN_CLASS_AVERAGE = 0.1

# Option letters used for letter-coded answers
OPTION_LETTERS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"

TRUE_TOKENS = frozenset({"t", "true"})
FALSE_TOKENS = frozenset({"f", "false"})
