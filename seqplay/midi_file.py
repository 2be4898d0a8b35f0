"""Standard MIDI File ingestion.

Reads file bytes with ``mido`` and reduces one track to the handful of event
kinds the builder cares about: note on, note off, tempo change, and everything
else.  Delta times are kept in raw file ticks.
"""

import dataclasses
import io
import logging
import struct
import typing

import mido

import seqplay.constants
import seqplay.exceptions
import seqplay.timing


logger = logging.getLogger(__name__)


NOTE_ON = "note_on"
NOTE_OFF = "note_off"
TEMPO_CHANGE = "tempo_change"
OTHER = "other"


@dataclasses.dataclass(frozen=True)
class RawEvent:

	"""
	A track event with its delta time in file ticks.
	"""

	delta_ticks: int
	kind: str
	key: int = 0
	velocity: int = 0
	channel: int = 0
	tempo: int = 0						# microseconds per quarter note, tempo changes only


	@property
	def is_note_start (self) -> bool:

		"""True for a note on with non-zero velocity."""

		return self.kind == NOTE_ON and self.velocity > 0


	@property
	def is_note_end (self) -> bool:

		"""True for a note off, or a note on with zero velocity."""

		return self.kind == NOTE_OFF or (self.kind == NOTE_ON and self.velocity == 0)


def note_on (key: int, velocity: int, delta_ticks: int = 0, channel: int = 0) -> RawEvent:

	"""Shorthand for a raw note on."""

	return RawEvent(delta_ticks=delta_ticks, kind=NOTE_ON, key=key, velocity=velocity, channel=channel)


def note_off (key: int, velocity: int = 0, delta_ticks: int = 0, channel: int = 0) -> RawEvent:

	"""Shorthand for a raw note off."""

	return RawEvent(delta_ticks=delta_ticks, kind=NOTE_OFF, key=key, velocity=velocity, channel=channel)


def tempo_change (tempo: int, delta_ticks: int = 0) -> RawEvent:

	"""Shorthand for a raw tempo marker (microseconds per quarter note)."""

	return RawEvent(delta_ticks=delta_ticks, kind=TEMPO_CHANGE, tempo=tempo)


def other (delta_ticks: int = 0) -> RawEvent:

	"""Shorthand for an event the builder ignores apart from its delta."""

	return RawEvent(delta_ticks=delta_ticks, kind=OTHER)


def raw_event_from_message (message: typing.Union[mido.Message, mido.MetaMessage]) -> RawEvent:

	"""Reduce a ``mido`` track message to a ``RawEvent``."""

	if message.type == 'note_on':
		return note_on(message.note, message.velocity, message.time, message.channel)

	if message.type == 'note_off':
		return note_off(message.note, message.velocity, message.time, message.channel)

	if message.type == 'set_tempo':
		return tempo_change(message.tempo, message.time)

	return other(message.time)


@dataclasses.dataclass
class MidiFileData:

	"""
	The parts of a MIDI file the builder needs: header timing and reduced tracks.
	"""

	timing: seqplay.timing.Timing
	tracks: typing.List[typing.List[RawEvent]]


	def track (self, index: int) -> typing.List[RawEvent]:

		"""Return one track's events, raising ``MissingTrack`` when out of range."""

		if not 0 <= index < len(self.tracks):
			raise seqplay.exceptions.MissingTrack(f"Track {index} not found (file has {len(self.tracks)} tracks)")

		return self.tracks[index]


	def initial_tempo (self) -> int:

		"""Return the first tempo marker in any track, or the 120 BPM default."""

		for track in self.tracks:
			for event in track:
				if event.kind == TEMPO_CHANGE:
					return event.tempo

		return seqplay.constants.DEFAULT_MICROSECONDS_PER_BEAT


def parse (data: bytes) -> MidiFileData:

	"""Read Standard MIDI File bytes.

	Raises ``ParseError`` for anything ``mido`` cannot read and for a file that
	declares no tracks.

	Example:
		```python
		with open("song.mid", "rb") as f:
			midi = parse(f.read())

		events = midi.track(1)
		```
	"""

	try:
		mid = mido.MidiFile(file=io.BytesIO(data))
	except (OSError, EOFError, ValueError, KeyError, IndexError, struct.error) as e:
		raise seqplay.exceptions.ParseError(f"Could not read MIDI file: {e}") from e

	if not mid.tracks:
		raise seqplay.exceptions.ParseError("MIDI file declares no tracks")

	# mido unpacks the division word as signed, SMPTE divisions come back negative.
	timing = seqplay.timing.timing_from_division(mid.ticks_per_beat & 0xFFFF)

	tracks: typing.List[typing.List[RawEvent]] = []

	for i, track in enumerate(mid.tracks):
		tracks.append([raw_event_from_message(message) for message in track])
		logger.debug(f"Track {i}: {len(track)} events")

	logger.info(f"Parsed MIDI file: {len(tracks)} tracks, {timing}")

	return MidiFileData(timing=timing, tracks=tracks)
