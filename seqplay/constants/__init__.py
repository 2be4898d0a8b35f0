"""Constants for seqplay.

- ``seqplay.constants.timing`` - Player tick rate, tempo and humanize defaults
- ``seqplay.constants.velocity`` - Velocity range and dynamic bucket boundaries

The most commonly used values are re-exported here.
"""

from seqplay.constants.timing import (
	DEFAULT_BPM,
	DEFAULT_MICROSECONDS_PER_BEAT,
	DEFAULT_TICKS_PER_BEAT,
	HUMANIZE_MS_RANGE,
	HUMANIZE_VELOCITY_RANGE,
	MAX_RING_BEATS,
)
from seqplay.constants.velocity import MAX_VELOCITY, MIN_VELOCITY

MIDI_KEY_COUNT = 128
DEFAULT_CHANNEL = 0
