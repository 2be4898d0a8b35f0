"""The playback loop.

``play_sequence()`` pulls events one at a time and hands them to a player.
Stopping is cooperative: the caller sets a ``threading.Event`` and the loop
notices before its next event.  A long ``Wait`` is not interrupted, so at most
one more event is handled after the flag is set.

Progress can be watched from another thread by passing a ``queue.Queue``; the
loop puts a fresh ``PlayerSnapshot`` on it after every event and never shares
the player itself.
"""

import itertools
import logging
import queue
import threading
import typing

import seqplay.events
import seqplay.exceptions
import seqplay.player


logger = logging.getLogger(__name__)


def play_sequence (
	player: seqplay.player.Player,
	events: typing.Iterable[seqplay.events.Event],
	cancel: typing.Optional[threading.Event] = None,
	progress: typing.Optional["queue.Queue[seqplay.player.PlayerSnapshot]"] = None,
	loop: bool = False
) -> int:

	"""Play events through ``player`` until they run out or ``cancel`` is set.

	Parameters:
		player: A connected player.
		events: The events to play.  With ``loop`` set, a one-shot iterator is
			read once up front and replayed from that copy.
		cancel: Polled once per event; playback stops when it is set.
		progress: Receives a snapshot after every handled event.
		loop: Start again from the top when the events run out.

	Returns:
		The number of events handled.

	Example:
		```python
		cancel = threading.Event()
		thread = threading.Thread(target=play_sequence, args=(player, sequence, cancel))
		thread.start()
		...
		cancel.set()
		thread.join()
		```
	"""

	if not player.is_connected:
		raise seqplay.exceptions.NotConnected("Player must be connected before playback")

	cancel = cancel or threading.Event()

	if loop:
		# One-shot iterators are replayed from a copy.
		events = tuple(events)
		if not events:
			raise seqplay.exceptions.EmptySequence("Nothing to play")
		stream: typing.Iterable[seqplay.events.Event] = itertools.chain.from_iterable(itertools.repeat(events))
	else:
		stream = events

	handled = 0
	logger.info("Playback started")

	for event in stream:

		if cancel.is_set():
			logger.info(f"Playback cancelled after {handled} events")
			break

		player.handle(event)
		handled += 1

		if progress is not None:
			progress.put(player.snapshot())

	else:
		if handled == 0:
			raise seqplay.exceptions.EmptySequence("Nothing to play")

	logger.info(f"Playback stopped at tick {player.ticks_played}")

	return handled
