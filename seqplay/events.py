import dataclasses
import enum
import typing

import seqplay.constants
import seqplay.constants.velocity


class Dynamic (enum.Enum):

	"""
	A coarse loudness bucket derived from a MIDI velocity.

	The enum value is the representative velocity used on playback.
	"""

	VERY_SOFT = seqplay.constants.velocity.VERY_SOFT
	SOFT = seqplay.constants.velocity.SOFT
	MEDIUM = seqplay.constants.velocity.MEDIUM
	LOUD = seqplay.constants.velocity.LOUD
	VERY_LOUD = seqplay.constants.velocity.VERY_LOUD


	@classmethod
	def from_velocity (cls, velocity: int) -> "Dynamic":

		"""Bucket a MIDI velocity (0-127).

		Boundaries are inclusive: 0-24 very soft, 25-49 soft, 50-76 medium,
		77-101 loud, 102-127 very loud.

		Example:
			```python
			Dynamic.from_velocity(70)   # Dynamic.MEDIUM
			Dynamic.from_velocity(100)  # Dynamic.LOUD
			```
		"""

		if not seqplay.constants.MIN_VELOCITY <= velocity <= seqplay.constants.MAX_VELOCITY:
			raise ValueError(f"Velocity must be 0-127, got {velocity}")

		if velocity <= seqplay.constants.velocity.VERY_SOFT_MAX:
			return cls.VERY_SOFT
		if velocity <= seqplay.constants.velocity.SOFT_MAX:
			return cls.SOFT
		if velocity <= seqplay.constants.velocity.MEDIUM_MAX:
			return cls.MEDIUM
		if velocity <= seqplay.constants.velocity.LOUD_MAX:
			return cls.LOUD
		return cls.VERY_LOUD


	@classmethod
	def default (cls) -> "Dynamic":

		"""Return the default dynamic (medium)."""

		return cls.MEDIUM


	@property
	def velocity (self) -> int:

		"""The representative velocity for this bucket."""

		return typing.cast(int, self.value)


	def up (self) -> "Dynamic":

		"""One bucket louder, saturating at very loud."""

		index = _DYNAMIC_ORDER.index(self)
		return _DYNAMIC_ORDER[min(index + 1, len(_DYNAMIC_ORDER) - 1)]


	def down (self) -> "Dynamic":

		"""One bucket softer, saturating at very soft."""

		index = _DYNAMIC_ORDER.index(self)
		return _DYNAMIC_ORDER[max(index - 1, 0)]


_DYNAMIC_ORDER: typing.List[Dynamic] = list(Dynamic)


def _check_key (key: int) -> None:

	if not 0 <= key < seqplay.constants.MIDI_KEY_COUNT:
		raise ValueError(f"MIDI key must be 0-127, got {key}")


def _check_ticks (ticks: int) -> None:

	if ticks <= 0:
		raise ValueError(f"Ticks must be positive, got {ticks}")


@dataclasses.dataclass(frozen=True)
class Wait:

	"""
	Advance playback time by a number of player ticks.
	"""

	ticks: int

	def __post_init__ (self) -> None:
		_check_ticks(self.ticks)


@dataclasses.dataclass(frozen=True)
class PlayNote:

	"""
	Start a note with no declared length.

	The player lets it ring for at most ``MAX_RING_BEATS`` beats.
	"""

	key: int
	dynamic: Dynamic = Dynamic.MEDIUM

	def __post_init__ (self) -> None:
		_check_key(self.key)


@dataclasses.dataclass(frozen=True)
class PlayNoteTicks:

	"""
	Start a note that should sound for ``ticks`` player ticks.
	"""

	key: int
	dynamic: Dynamic
	ticks: int

	def __post_init__ (self) -> None:
		_check_key(self.key)
		_check_ticks(self.ticks)


@dataclasses.dataclass(frozen=True)
class StopNote:

	"""
	Stop a sounding note.
	"""

	key: int

	def __post_init__ (self) -> None:
		_check_key(self.key)


Event = typing.Union[Wait, PlayNote, PlayNoteTicks, StopNote]

DynamicLike = typing.Union[Dynamic, int]


def _to_dynamic (dynamic: DynamicLike) -> Dynamic:

	if isinstance(dynamic, Dynamic):
		return dynamic

	return Dynamic.from_velocity(dynamic)


def play (key: int, dynamic: DynamicLike = Dynamic.MEDIUM) -> PlayNote:

	"""Build an open-ended note from a dynamic or a raw velocity."""

	return PlayNote(key=key, dynamic=_to_dynamic(dynamic))


def play_ticks (key: int, dynamic: DynamicLike, ticks: int) -> PlayNoteTicks:

	"""Build a note with an explicit length from a dynamic or a raw velocity."""

	return PlayNoteTicks(key=key, dynamic=_to_dynamic(dynamic), ticks=ticks)


def stop (key: int) -> StopNote:

	"""Build a stop event for a key."""

	return StopNote(key=key)


def wait (ticks: int) -> Wait:

	"""Build a wait of ``ticks`` player ticks."""

	return Wait(ticks=ticks)


class EventSequence:

	"""An ordered, immutable run of events and the tick rate they were built at.

	The sequence can be iterated any number of times, so a player can loop it
	or a generative model can be fed from it while it is also being played.

	Example:
		```python
		sequence = EventSequence([wait(12), play_ticks(60, 70, 6)], ticks_per_beat=12)
		len(sequence)          # 2
		sequence.total_ticks   # 12
		```
	"""

	def __init__ (self, events: typing.Iterable[Event], ticks_per_beat: int = seqplay.constants.DEFAULT_TICKS_PER_BEAT) -> None:

		"""Store the events as a tuple.

		Parameters:
			events: Events in playback order.
			ticks_per_beat: Player ticks per quarter note the events were built at.
		"""

		if ticks_per_beat <= 0:
			raise ValueError("Ticks per beat must be positive")

		self._events: typing.Tuple[Event, ...] = tuple(events)
		self._ticks_per_beat = ticks_per_beat

	@property
	def events (self) -> typing.Tuple[Event, ...]:

		"""The events in playback order."""

		return self._events

	@property
	def ticks_per_beat (self) -> int:

		"""Player ticks per quarter note."""

		return self._ticks_per_beat

	@property
	def total_ticks (self) -> int:

		"""Sum of all wait ticks in the sequence."""

		return sum(event.ticks for event in self._events if isinstance(event, Wait))

	def __iter__ (self) -> typing.Iterator[Event]:
		return iter(self._events)

	def __len__ (self) -> int:
		return len(self._events)

	def __getitem__ (self, index: int) -> Event:
		return self._events[index]

	def __eq__ (self, other: object) -> bool:

		if not isinstance(other, EventSequence):
			return NotImplemented

		return self._events == other._events and self._ticks_per_beat == other._ticks_per_beat

	def __repr__ (self) -> str:
		return f"EventSequence({len(self._events)} events, ticks_per_beat={self._ticks_per_beat})"
