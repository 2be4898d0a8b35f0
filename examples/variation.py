"""Play a MIDI track, then a generated variation of it.

Usage:
	python examples/variation.py song.mid "Synth:Synth MIDI 1 20:0"

The variation comes from a tiny first-order chain written inline below.  Any
object with ``feed()`` and ``generate()`` works in its place.
"""

import collections
import logging
import random
import sys
import threading
import typing

import seqplay


logging.basicConfig(level=logging.INFO)

TRACK = 1
BPM = 110
CHUNK_SIZE = 32


class FirstOrderChain:

	def __init__ (self, seed: typing.Optional[int] = None) -> None:

		self.transitions: typing.Dict[seqplay.Event, typing.List[seqplay.Event]] = collections.defaultdict(list)
		self.starts: typing.List[seqplay.Event] = []
		self.rng = random.Random(seed)

	def feed (self, tokens: typing.Sequence[seqplay.Event]) -> None:

		if not tokens:
			return

		self.starts.append(tokens[0])

		for current, following in zip(tokens, tokens[1:]):
			self.transitions[current].append(following)

	def generate (self) -> typing.Iterator[seqplay.Event]:

		if not self.starts:
			return

		event = self.rng.choice(self.starts)

		while True:
			yield event

			choices = self.transitions.get(event)
			event = self.rng.choice(choices) if choices else self.rng.choice(self.starts)


def main (path: str, port: str) -> None:

	with open(path, "rb") as f:
		sequence = seqplay.parse_sequence(f.read(), TRACK)

	chain = FirstOrderChain(seed=1)
	seqplay.feed_sequence(chain, sequence, chunk_size=CHUNK_SIZE)
	variation = seqplay.regenerate(chain, limit=len(sequence), ticks_per_beat=sequence.ticks_per_beat)

	cancel = threading.Event()

	with seqplay.Player(bpm=BPM, ticks_per_beat=sequence.ticks_per_beat) as player:
		player.connect(port)

		try:
			seqplay.play_sequence(player, sequence, cancel)
			seqplay.play_sequence(player, variation, cancel)
		except KeyboardInterrupt:
			pass


if __name__ == "__main__":
	main(sys.argv[1], sys.argv[2])
