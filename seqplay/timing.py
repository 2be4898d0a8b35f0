"""Conversion between file ticks and player ticks.

A Standard MIDI File measures time in one of two ways:

- **Metrical** - a fixed number of pulses per quarter note (PPQ).  The tick
  length in seconds depends on tempo, but the number of ticks in a beat does not.
- **Timecode** - SMPTE frames per second and subframes per frame.  Ticks are a
  fixed length in seconds, so the number of ticks in a beat changes with tempo.

Player ticks are the fixed resolution the player paces at (``ticks_per_beat``
per quarter note).  ``convert()`` rescales a file tick count to player ticks for
the tempo in force at that point in the track.

Tempo is carried as microseconds per quarter note, the unit tempo markers use.
"""

import dataclasses
import math
import typing

import mido

import seqplay.constants


@dataclasses.dataclass(frozen=True)
class Metrical:

	"""
	File timing in pulses per quarter note.
	"""

	pulses_per_quarter_note: int

	def __post_init__ (self) -> None:

		if self.pulses_per_quarter_note <= 0:
			raise ValueError("Pulses per quarter note must be positive")


@dataclasses.dataclass(frozen=True)
class Timecode:

	"""
	File timing in SMPTE frames per second and subframes per frame.
	"""

	frames_per_second: int
	subframes_per_frame: int

	def __post_init__ (self) -> None:

		if self.frames_per_second <= 0 or self.subframes_per_frame <= 0:
			raise ValueError("Frames per second and subframes per frame must be positive")


Timing = typing.Union[Metrical, Timecode]


def timing_from_division (division: int) -> Timing:

	"""Decode the 16-bit division word of a MIDI file header.

	When the top bit is clear the word is pulses per quarter note.  When it is
	set the high byte is the negated frames per second (two's complement) and
	the low byte is subframes per frame.

	Example:
		```python
		timing_from_division(480)     # Metrical(pulses_per_quarter_note=480)
		timing_from_division(0xE728)  # Timecode(frames_per_second=25, subframes_per_frame=40)
		```
	"""

	if division & 0x8000:
		frames_per_second = 256 - ((division >> 8) & 0xFF)
		subframes_per_frame = division & 0xFF
		return Timecode(frames_per_second, subframes_per_frame)

	return Metrical(division)


def tempo_to_bpm (microseconds_per_beat: float) -> float:

	"""Convert a tempo marker value to beats per minute."""

	if microseconds_per_beat <= 0:
		raise ValueError("Tempo must be positive")

	return float(mido.tempo2bpm(microseconds_per_beat))


def bpm_to_tempo (bpm: float) -> int:

	"""Convert beats per minute to a tempo marker value."""

	if bpm <= 0:
		raise ValueError("BPM must be positive")

	return int(mido.bpm2tempo(bpm))


def raw_ticks_per_beat (timing: Timing, tempo: float = seqplay.constants.DEFAULT_MICROSECONDS_PER_BEAT) -> float:

	"""Return how many file ticks make up one quarter note.

	Metrical timing ignores tempo.  Timecode timing does not, so callers must
	pass the tempo in force at the point being converted.

	Parameters:
		timing: The file's header timing.
		tempo: Microseconds per quarter note.
	"""

	if isinstance(timing, Metrical):
		return float(timing.pulses_per_quarter_note)

	beats_per_second = tempo_to_bpm(tempo) / 60.0

	return timing.frames_per_second * timing.subframes_per_frame / beats_per_second


def convert (raw_ticks: int, timing: Timing, tempo: float, ticks_per_beat: int) -> int:

	"""Rescale file ticks to player ticks, rounding to the nearest tick.

	Example:
		```python
		convert(240, Metrical(480), 500000, 100)  # 50
		```
	"""

	if raw_ticks < 0:
		raise ValueError("Raw ticks cannot be negative")

	if ticks_per_beat <= 0:
		raise ValueError("Ticks per beat must be positive")

	beats = raw_ticks / raw_ticks_per_beat(timing, tempo)

	# Halves round up.
	return int(math.floor(beats * ticks_per_beat + 0.5))
