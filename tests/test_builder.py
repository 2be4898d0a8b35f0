import random

import mido
import pytest

import seqplay.builder
import seqplay.exceptions
import conftest

from seqplay.events import Dynamic, PlayNote, PlayNoteTicks, Wait
from seqplay.midi_file import note_off, note_on, other, tempo_change
from seqplay.timing import Metrical, Timecode


def test_single_note_without_leading_rest () -> None:

	"""A note at time zero produces no leading wait."""

	track = [note_on(60, 70), note_off(60, 0, 240)]

	sequence = seqplay.builder.build(track, Metrical(480), ticks_per_beat=100)

	assert sequence.events == (PlayNoteTicks(key=60, dynamic=Dynamic.MEDIUM, ticks=50),)
	assert sequence.ticks_per_beat == 100


def test_leading_rest_becomes_wait () -> None:

	"""A one-beat rest before the note becomes a 100-tick wait."""

	track = [note_on(60, 70, 480), note_off(60, 0, 240)]

	sequence = seqplay.builder.build(track, Metrical(480), ticks_per_beat=100)

	assert sequence.events == (
		Wait(ticks=100),
		PlayNoteTicks(key=60, dynamic=Dynamic.MEDIUM, ticks=50),
	)


def test_note_off_and_other_deltas_accumulate_into_next_wait () -> None:

	"""Deltas of events that emit nothing are carried into the next wait."""

	track = [
		note_on(60, 100),
		note_off(60, 0, 240),
		other(120),
		tempo_change(500000, 120),
		note_on(62, 30),
		note_off(62, 0, 480),
	]

	sequence = seqplay.builder.build(track, Metrical(480), ticks_per_beat=12)

	assert sequence.events == (
		PlayNoteTicks(key=60, dynamic=Dynamic.LOUD, ticks=6),
		Wait(ticks=12),
		PlayNoteTicks(key=62, dynamic=Dynamic.SOFT, ticks=12),
	)


def test_chord_has_no_zero_waits () -> None:

	"""Simultaneous notes follow each other with no wait between them."""

	track = [note_on(60, 70), note_on(64, 70), note_on(67, 70), note_off(60, 0, 480), note_off(64), note_off(67)]

	sequence = seqplay.builder.build(track, Metrical(480), ticks_per_beat=12)

	assert [type(event) for event in sequence] == [PlayNoteTicks, PlayNoteTicks, PlayNoteTicks]
	assert all(event.ticks == 12 for event in sequence)


def test_trailing_rest_is_dropped () -> None:

	"""Ticks after the last note on never become a trailing wait."""

	track = [note_on(60, 70), note_off(60, 0, 480), other(960)]

	sequence = seqplay.builder.build(track, Metrical(480), ticks_per_beat=12)

	assert sequence.events == (PlayNoteTicks(key=60, dynamic=Dynamic.MEDIUM, ticks=12),)


def test_unterminated_note_is_open_ended () -> None:

	"""A note with no note off becomes a PlayNote."""

	track = [note_on(60, 110, 480)]

	sequence = seqplay.builder.build(track, Metrical(480), ticks_per_beat=12)

	assert sequence.events == (Wait(ticks=12), PlayNote(key=60, dynamic=Dynamic.VERY_LOUD))


def test_very_short_note_is_open_ended () -> None:

	"""A length that rounds to zero player ticks becomes a PlayNote."""

	track = [note_on(60, 70), note_off(60, 0, 5)]

	sequence = seqplay.builder.build(track, Metrical(480), ticks_per_beat=12)

	assert sequence.events == (PlayNote(key=60, dynamic=Dynamic.MEDIUM),)


def test_short_rests_below_one_tick_are_dropped () -> None:

	"""A gap that rounds to zero player ticks emits no wait."""

	track = [note_on(60, 70), note_on(62, 70, 5), note_off(60, 0, 475), note_off(62, 0, 5)]

	sequence = seqplay.builder.build(track, Metrical(480), ticks_per_beat=12)

	assert sequence.events == (
		PlayNoteTicks(key=60, dynamic=Dynamic.MEDIUM, ticks=12),
		PlayNoteTicks(key=62, dynamic=Dynamic.MEDIUM, ticks=12),
	)


def test_tempo_change_affects_later_timecode_conversions () -> None:

	"""With timecode timing, a tempo marker changes how later ticks convert.

	25 x 40 is 1000 ticks a second: 500 ticks a beat at 120 BPM and 1000 at
	60 BPM.  The 1500 ticks pending when the second note starts are converted
	at the new tempo.
	"""

	track = [
		note_on(60, 70),
		note_off(60, 0, 500),
		tempo_change(1000000),
		note_on(62, 70, 1000),
		note_off(62, 0, 500),
	]

	sequence = seqplay.builder.build(track, Timecode(25, 40), start_tempo=500000, ticks_per_beat=12)

	assert sequence.events == (
		PlayNoteTicks(key=60, dynamic=Dynamic.MEDIUM, ticks=12),
		Wait(ticks=18),
		PlayNoteTicks(key=62, dynamic=Dynamic.MEDIUM, ticks=6),
	)


def test_tempo_change_ignored_for_metrical_timing () -> None:

	track = [tempo_change(250000), note_on(60, 70, 480), note_off(60, 0, 480)]

	sequence = seqplay.builder.build(track, Metrical(480), ticks_per_beat=12)

	assert sequence.events == (Wait(ticks=12), PlayNoteTicks(key=60, dynamic=Dynamic.MEDIUM, ticks=12))


def test_random_tracks_never_contain_zero_ticks () -> None:

	"""No built sequence ever holds a zero-tick wait or ticked note."""

	rng = random.Random(3)

	for _ in range(50):

		track = []

		for _ in range(60):
			delta = rng.choice([0, 0, 1, 3, 17, 40, 240, 480])
			key = rng.randint(60, 64)

			if rng.random() < 0.5:
				track.append(note_on(key, rng.randint(1, 127), delta))
			else:
				track.append(note_off(key, 0, delta))

		sequence = seqplay.builder.build(track, Metrical(480), ticks_per_beat=rng.choice([4, 12, 96]))

		for event in sequence:
			if isinstance(event, (Wait, PlayNoteTicks)):
				assert event.ticks > 0


def test_parse_sequence_from_bytes () -> None:

	"""File bytes build a sequence using the tempo map from track 0."""

	data = conftest.midi_bytes([
		[mido.MetaMessage('set_tempo', tempo=500000, time=0)],
		[
			mido.Message('note_on', note=60, velocity=70, time=480),
			mido.Message('note_off', note=60, velocity=0, time=240),
		],
	], ticks_per_beat=480)

	sequence = seqplay.builder.parse_sequence(data, 1, ticks_per_beat=100)

	assert sequence.events == (Wait(ticks=100), PlayNoteTicks(key=60, dynamic=Dynamic.MEDIUM, ticks=50))


def test_parse_sequence_empty_track () -> None:

	"""A track with no notes raises EmptySequence."""

	data = conftest.midi_bytes([[mido.MetaMessage('set_tempo', tempo=500000, time=0)]])

	with pytest.raises(seqplay.exceptions.EmptySequence):
		seqplay.builder.parse_sequence(data, 0)


def test_parse_sequence_missing_track () -> None:

	data = conftest.midi_bytes([[mido.Message('note_on', note=60, velocity=70, time=0)]])

	with pytest.raises(seqplay.exceptions.MissingTrack):
		seqplay.builder.parse_sequence(data, 3)
