"""MIDI velocity constants.

Velocities are bucketed into five coarse dynamics.  Each bucket has an
inclusive upper bound and a representative velocity used on playback.
"""

MIN_VELOCITY = 0
MAX_VELOCITY = 127

# Inclusive upper bound of each dynamic bucket, softest first.
VERY_SOFT_MAX = 24
SOFT_MAX = 49
MEDIUM_MAX = 76
LOUD_MAX = 101

# Representative velocity per bucket.
VERY_SOFT = 16
SOFT = 40
MEDIUM = 64
LOUD = 88
VERY_LOUD = 112
