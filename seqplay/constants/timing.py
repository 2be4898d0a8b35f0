"""Timing defaults for the player and the file converter.

Player ticks are independent of the file resolution.  A sequence is built at
some number of ticks per beat and the player paces it at the same rate:

- `DEFAULT_TICKS_PER_BEAT = 12` - twelve player ticks per quarter note
- `DEFAULT_BPM = 120` - player tempo until ``set_tempo()`` is called
- `DEFAULT_MICROSECONDS_PER_BEAT = 500000` - file tempo assumed before the
  first tempo marker (the Standard MIDI File default, 120 BPM)
"""

DEFAULT_TICKS_PER_BEAT = 12
DEFAULT_BPM = 120.0
DEFAULT_MICROSECONDS_PER_BEAT = 500000

# Longest a note without a declared duration may ring, in beats.
MAX_RING_BEATS = 4

# Humanize half-widths are drawn from [-range/2, +range/2].
HUMANIZE_MS_RANGE = 30.0
HUMANIZE_VELOCITY_RANGE = 12.0

# Sleep to within this many seconds of a target, then spin.
SPIN_THRESHOLD = 0.001
