"""Event stream building.

Turns one track of raw file events into an ``EventSequence`` of player events:
rests become ``Wait``, note ons become ``PlayNoteTicks`` (or ``PlayNote`` when
their length rounds to nothing).  Note offs are not emitted, their timing is
already folded into the note lengths.

Tempo markers change the conversion for ticks that follow them, which only
matters for timecode files.
"""

import logging
import typing

import seqplay.constants
import seqplay.events
import seqplay.exceptions
import seqplay.midi_file
import seqplay.note_off
import seqplay.timing


logger = logging.getLogger(__name__)


def build (
	raw_events: typing.Sequence[seqplay.midi_file.RawEvent],
	timing: seqplay.timing.Timing,
	start_tempo: float = seqplay.constants.DEFAULT_MICROSECONDS_PER_BEAT,
	ticks_per_beat: int = seqplay.constants.DEFAULT_TICKS_PER_BEAT
) -> seqplay.events.EventSequence:

	"""Build a player event sequence from one track.

	Walks the track once.  File ticks accumulate until the next note on; they
	are then converted to player ticks and emitted as a ``Wait`` if they come to
	more than zero.  Ticks after the last note on are dropped.

	Parameters:
		raw_events: The track's events in file order.
		timing: The file's header timing.
		start_tempo: Tempo in force before the first marker, in microseconds
			per quarter note.
		ticks_per_beat: Player ticks per quarter note.

	Example:
		```python
		track = [note_on(60, 70), note_off(60, 0, 240)]
		build(track, Metrical(480), ticks_per_beat=100).events
		# (PlayNoteTicks(key=60, dynamic=Dynamic.MEDIUM, ticks=50),)
		```
	"""

	distances = seqplay.note_off.resolve_off_distances(raw_events)

	events: typing.List[seqplay.events.Event] = []
	tempo = start_tempo
	pending = 0

	for index, raw in enumerate(raw_events):

		pending += raw.delta_ticks

		if raw.kind == seqplay.midi_file.TEMPO_CHANGE:
			tempo = raw.tempo
			continue

		if not raw.is_note_start:
			continue

		rest = seqplay.timing.convert(pending, timing, tempo, ticks_per_beat)
		pending = 0

		if rest > 0:
			events.append(seqplay.events.Wait(ticks=rest))

		dynamic = seqplay.events.Dynamic.from_velocity(raw.velocity)
		length = seqplay.timing.convert(distances[index], timing, tempo, ticks_per_beat)

		if length > 0:
			events.append(seqplay.events.PlayNoteTicks(key=raw.key, dynamic=dynamic, ticks=length))
		else:
			events.append(seqplay.events.PlayNote(key=raw.key, dynamic=dynamic))

	return seqplay.events.EventSequence(events, ticks_per_beat=ticks_per_beat)


def parse_sequence (data: bytes, track_index: int, ticks_per_beat: int = seqplay.constants.DEFAULT_TICKS_PER_BEAT) -> seqplay.events.EventSequence:

	"""Read MIDI file bytes and build the sequence for one track.

	The starting tempo is the first tempo marker found in any track, so a
	format 1 file whose tempo map lives in track 0 converts correctly.

	Raises ``ParseError``, ``MissingTrack``, or ``EmptySequence`` when the
	track yields no events.
	"""

	midi = seqplay.midi_file.parse(data)
	track = midi.track(track_index)

	sequence = build(track, midi.timing, start_tempo=midi.initial_tempo(), ticks_per_beat=ticks_per_beat)

	if not sequence:
		raise seqplay.exceptions.EmptySequence(f"Track {track_index} has no notes to play")

	logger.info(f"Built sequence from track {track_index}: {len(sequence)} events, {sequence.total_ticks} ticks")

	return sequence
