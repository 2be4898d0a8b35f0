"""Glue between event sequences and a generative sequence model.

The model itself lives elsewhere (an order-N Markov chain over events, for
example).  All this module relies on is the ``GenerativeModel`` protocol: the
model can be fed runs of events and can produce a fresh, lazy stream of events
on demand.  Nothing here looks inside the model.
"""

import itertools
import logging
import typing

import seqplay.constants
import seqplay.events
import seqplay.exceptions


logger = logging.getLogger(__name__)


@typing.runtime_checkable
class GenerativeModel (typing.Protocol):

	"""
	Protocol for models that learn from and generate player events.
	"""

	def feed (self, tokens: typing.Sequence[seqplay.events.Event]) -> None:

		"""
		Learn from one run of consecutive events.
		"""

		...


	def generate (self) -> typing.Iterator[seqplay.events.Event]:

		"""
		Return a new lazy stream of events.  Each call starts over.
		"""

		...


def chunks (events: typing.Iterable[seqplay.events.Event], chunk_size: int) -> typing.Iterator[typing.Tuple[seqplay.events.Event, ...]]:

	"""Split events into consecutive tuples of at most ``chunk_size``."""

	if chunk_size <= 0:
		raise ValueError("Chunk size must be positive")

	iterator = iter(events)

	while True:
		chunk = tuple(itertools.islice(iterator, chunk_size))

		if not chunk:
			return

		yield chunk


def feed_sequence (model: GenerativeModel, sequence: typing.Iterable[seqplay.events.Event], chunk_size: typing.Optional[int] = None) -> int:

	"""Feed a sequence to the model, whole or in chunks.

	Parameters:
		model: The model to train.
		sequence: Events in playback order.
		chunk_size: When given, feed consecutive runs of this many events
			instead of the whole sequence at once.

	Returns:
		The number of ``feed`` calls made.
	"""

	if chunk_size is None:
		tokens = tuple(sequence)
		if not tokens:
			return 0
		model.feed(tokens)
		return 1

	count = 0

	for chunk in chunks(sequence, chunk_size):
		model.feed(chunk)
		count += 1

	logger.debug(f"Fed {count} chunks of up to {chunk_size} events")

	return count


def regenerate (
	model: GenerativeModel,
	limit: int,
	ticks_per_beat: int = seqplay.constants.DEFAULT_TICKS_PER_BEAT
) -> seqplay.events.EventSequence:

	"""Draw up to ``limit`` events from a fresh model stream.

	Zero-tick waits are dropped so the result obeys the same rules as a built
	sequence.  Raises ``EmptySequence`` if nothing playable comes out.

	Example:
		```python
		feed_sequence(chain, sequence, chunk_size=32)
		variation = regenerate(chain, limit=len(sequence), ticks_per_beat=sequence.ticks_per_beat)
		```
	"""

	if limit <= 0:
		raise ValueError("Limit must be positive")

	events = [
		event for event in itertools.islice(model.generate(), limit)
		if not (isinstance(event, seqplay.events.Wait) and event.ticks <= 0)
	]

	if not events:
		raise seqplay.exceptions.EmptySequence("Model produced no events")

	logger.info(f"Generated {len(events)} events")

	return seqplay.events.EventSequence(events, ticks_per_beat=ticks_per_beat)
