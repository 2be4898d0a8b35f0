"""Note-off resolution.

For each note on, find how many file ticks pass before the note ends.  A note
ends at the first later note off for the same key, or note on for the same key
with zero velocity.

Matching is on key alone.  The channel of either event is ignored, so two
overlapping notes of the same key on different channels both end at whichever
terminator comes first.

A note with no terminator before the end of the track resolves to 0 ticks.
The builder turns those into open-ended notes, which the player cuts off after
``MAX_RING_BEATS``.
"""

import logging
import typing

import seqplay.midi_file


logger = logging.getLogger(__name__)


def resolve_off_distance (events: typing.Sequence[seqplay.midi_file.RawEvent], start_index: int, key: int) -> int:

	"""Scan forward from one note on to its terminator.

	Sums delta ticks from ``start_index + 1`` up to and including the first
	terminator for ``key``.  Returns 0 when there is none.

	This walks the rest of the track for every call.  ``resolve_off_distances``
	gives the same answers for a whole track in one pass.
	"""

	total = 0

	for event in events[start_index + 1:]:

		total += event.delta_ticks

		if event.is_note_end and event.key == key:
			return total

	return 0


def resolve_off_distances (events: typing.Sequence[seqplay.midi_file.RawEvent]) -> typing.Dict[int, int]:

	"""Resolve every note on in a track in a single pass.

	Returns a mapping from the index of each note on (non-zero velocity) to its
	distance in file ticks, identical to calling ``resolve_off_distance`` on
	each of them.

	Example:
		```python
		events = [note_on(60, 70), note_on(64, 70, 120), note_off(60, 0, 120)]
		resolve_off_distances(events)  # {0: 240, 1: 120}
		```
	"""

	distances: typing.Dict[int, int] = {}

	# Open note ons per key: (event index, absolute tick of the note on).
	open_notes: typing.Dict[int, typing.List[typing.Tuple[int, int]]] = {}
	now = 0

	for index, event in enumerate(events):

		now += event.delta_ticks

		if event.is_note_end:
			for start_index, start_tick in open_notes.pop(event.key, []):
				distances[start_index] = now - start_tick

		elif event.is_note_start:
			open_notes.setdefault(event.key, []).append((index, now))

	for key, unterminated in open_notes.items():
		for start_index, _ in unterminated:
			logger.warning(f"Note on for key {key} at event {start_index} has no note off")
			distances[start_index] = 0

	return distances
