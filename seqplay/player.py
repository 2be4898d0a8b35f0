import dataclasses
import logging
import math
import random
import time
import types
import typing

import mido

import seqplay.constants
import seqplay.constants.timing
import seqplay.events
import seqplay.exceptions
import seqplay.midi_utils


logger = logging.getLogger(__name__)


SleepFn = typing.Callable[[float], None]


@dataclasses.dataclass(frozen=True)
class PlayerSnapshot:

	"""
	A read-only copy of player progress, safe to hand to another thread.
	"""

	ticks_played: int
	bpm: float
	ticks_per_beat: int
	sounding_keys: typing.Tuple[int, ...] = ()
	events_handled: int = 0


def precise_sleep (seconds: float, spin_threshold: float = seqplay.constants.timing.SPIN_THRESHOLD) -> None:

	"""Sleep for ``seconds`` using a hybrid sleep+spin strategy.

	Sleeps to within ``spin_threshold`` of the target, then busy-waits on
	``time.perf_counter()`` for the remainder.
	"""

	if seconds <= 0:
		return

	target = time.perf_counter() + seconds

	if seconds > spin_threshold:
		time.sleep(seconds - spin_threshold)

	while time.perf_counter() < target:
		pass


class Player:

	"""Drives a live MIDI output from a stream of player events.

	Each ``handle()`` call plays one event.  ``Wait`` events block for their
	length in wall-clock time; everything else returns immediately.  Every
	started note gets a deadline tick, and after each event any note whose
	deadline has passed is stopped.  That sweep is what ends notes whose stop
	event never arrives.

	Timing and velocity are humanized with small random offsets.  The timing
	offset added to one wait is taken back off the next, so the jitter never
	accumulates into tempo drift.

	A player owns its state outright.  Drive it from a single thread and share
	progress through ``snapshot()``.

	Example:
		```python
		with Player(bpm=96) as player:
			player.connect("Synth:Synth MIDI 1 20:0")

			for event in sequence:
				player.handle(event)
		```
	"""

	def __init__ (
		self,
		bpm: float = seqplay.constants.DEFAULT_BPM,
		ticks_per_beat: int = seqplay.constants.DEFAULT_TICKS_PER_BEAT,
		channel: int = seqplay.constants.DEFAULT_CHANNEL,
		humanize_ms: float = seqplay.constants.HUMANIZE_MS_RANGE,
		humanize_velocity: float = seqplay.constants.HUMANIZE_VELOCITY_RANGE,
		rng: typing.Optional[random.Random] = None,
		sleep: typing.Optional[SleepFn] = None,
		spin_wait: bool = True
	) -> None:

		"""Create a disconnected player.

		Parameters:
			bpm: Playback tempo in beats per minute.
			ticks_per_beat: Player ticks per quarter note; should match the
				sequence being played.
			channel: MIDI channel (0-15) for outgoing note messages.
			humanize_ms: Full width of the timing jitter window in milliseconds.
				Each wait is shifted by up to half this in either direction.
			humanize_velocity: Full width of the velocity jitter window.
			rng: Random source for jitter draws (defaults to a fresh ``random.Random``).
			sleep: Blocking sleep callable taking seconds.  Overrides ``spin_wait``.
			spin_wait: When True (default) and no ``sleep`` is given, busy-wait
				the final millisecond of each wait for tighter timing.  Set to
				False to use plain ``time.sleep()``.
		"""

		if not 0 <= channel <= 15:
			raise ValueError("MIDI channel must be 0-15")

		self.channel = channel
		self.midi_out: typing.Any = None
		self.output_device_name: typing.Optional[str] = None

		self._rng = rng or random.Random()

		if sleep is not None:
			self._sleep: SleepFn = sleep
		elif spin_wait:
			self._sleep = precise_sleep
		else:
			self._sleep = time.sleep

		self._ticks_played = 0
		self._events_handled = 0

		# Deadline tick per key; None when the key is not sounding.
		self._notes_on: typing.List[typing.Optional[int]] = [None] * seqplay.constants.MIDI_KEY_COUNT

		# Milliseconds to apply to the next wait, undoing the last wait's jitter.
		self._timeshift = 0.0

		self._humanize_ms = 0.0
		self._humanize_velocity = 0.0
		self.set_humanize_timing(humanize_ms)
		self.set_humanize_velocity(humanize_velocity)

		self._bpm = 0.0
		self._ticks_per_beat = 0
		self._tick_duration = 0.0
		self._set_timing(bpm, ticks_per_beat)

	# ------------------------------------------------------------------
	# Connection
	# ------------------------------------------------------------------

	def connect (self, port_name: str) -> "Player":

		"""Open the output port with exactly this name.

		A player holds one connection; connecting again closes the previous
		port first.  Raises ``PortNotFound`` when no port matches.
		"""

		if self.midi_out is not None:
			self.close()

		self.midi_out = seqplay.midi_utils.open_output_device(port_name)
		self.output_device_name = port_name

		return self

	@property
	def is_connected (self) -> bool:

		"""True while an output port is open."""

		return self.midi_out is not None

	def close (self) -> None:

		"""Stop any sounding notes and close the output port.

		Safe to call any number of times; only the first call on a connected
		player does anything.
		"""

		if self.midi_out is None:
			return

		try:
			for key in self.sounding_keys():
				self._stop_key(key)

		finally:
			midi_out = self.midi_out
			self.midi_out = None
			midi_out.close()
			logger.info(f"Closed MIDI output: {self.output_device_name}")

	disconnect = close

	def __enter__ (self) -> "Player":
		return self

	def __exit__ (
		self,
		exc_type: typing.Optional[typing.Type[BaseException]],
		exc_value: typing.Optional[BaseException],
		traceback: typing.Optional[types.TracebackType]
	) -> None:
		self.close()

	# ------------------------------------------------------------------
	# Settings
	# ------------------------------------------------------------------

	def _set_timing (self, bpm: float, ticks_per_beat: int) -> None:

		if bpm <= 0:
			raise ValueError("BPM must be positive")

		if ticks_per_beat <= 0:
			raise ValueError("Ticks per beat must be positive")

		self._bpm = float(bpm)
		self._ticks_per_beat = ticks_per_beat
		self._tick_duration = 60.0 / self._bpm / self._ticks_per_beat

	def set_tempo (self, bpm: float) -> None:

		"""Change the playback tempo in beats per minute."""

		self._set_timing(bpm, self._ticks_per_beat)
		logger.info(f"BPM set to {self._bpm:.2f}")

	def set_ticks_per_beat (self, ticks_per_beat: int) -> None:

		"""Change the player tick rate; should match the sequence being played."""

		self._set_timing(self._bpm, ticks_per_beat)
		logger.info(f"Ticks per beat set to {self._ticks_per_beat}")

	def set_humanize_timing (self, ms_range: float) -> None:

		"""Set the timing jitter window in milliseconds (0 disables)."""

		if ms_range < 0:
			raise ValueError("Humanize timing range cannot be negative")

		self._humanize_ms = float(ms_range)

	def set_humanize_velocity (self, velocity_range: float) -> None:

		"""Set the velocity jitter window (0 disables)."""

		if velocity_range < 0:
			raise ValueError("Humanize velocity range cannot be negative")

		self._humanize_velocity = float(velocity_range)

	# ------------------------------------------------------------------
	# State
	# ------------------------------------------------------------------

	@property
	def tempo (self) -> float:

		"""Playback tempo in beats per minute."""

		return self._bpm

	@property
	def ticks_per_beat (self) -> int:
		return self._ticks_per_beat

	@property
	def tick_duration (self) -> float:

		"""Wall-clock length of one player tick in seconds."""

		return self._tick_duration

	@property
	def ticks_played (self) -> int:

		"""Player ticks elapsed through ``Wait`` events."""

		return self._ticks_played

	@property
	def timeshift (self) -> float:

		"""Milliseconds the next wait will be corrected by."""

		return self._timeshift

	def deadline (self, key: int) -> typing.Optional[int]:

		"""Return the tick after which ``key`` is stopped, or None if silent."""

		return self._notes_on[key]

	def sounding_keys (self) -> typing.List[int]:

		"""Return the keys that currently hold a deadline."""

		return [key for key, deadline in enumerate(self._notes_on) if deadline is not None]

	def snapshot (self) -> PlayerSnapshot:

		"""Return an immutable copy of the player's progress."""

		return PlayerSnapshot(
			ticks_played = self._ticks_played,
			bpm = self._bpm,
			ticks_per_beat = self._ticks_per_beat,
			sounding_keys = tuple(self.sounding_keys()),
			events_handled = self._events_handled
		)

	# ------------------------------------------------------------------
	# Playback
	# ------------------------------------------------------------------

	def handle (self, event: seqplay.events.Event) -> None:

		"""Play one event, then stop any note past its deadline.

		Raises ``NotConnected`` if no port is open.  Failures writing to the
		port are logged and ignored.
		"""

		if self.midi_out is None:
			raise seqplay.exceptions.NotConnected("Not connected to a MIDI output port")

		if isinstance(event, seqplay.events.PlayNoteTicks):
			self._play_key(event.key, event.dynamic, event.ticks)

		elif isinstance(event, seqplay.events.PlayNote):
			self._play_key(event.key, event.dynamic, self._ticks_per_beat * seqplay.constants.MAX_RING_BEATS)

		elif isinstance(event, seqplay.events.StopNote):
			logger.debug(f"Stopping key {event.key}")
			self._stop_key(event.key)

		elif isinstance(event, seqplay.events.Wait):
			self._wait(event.ticks)

		else:
			raise TypeError(f"Unknown event: {event!r}")

		self._events_handled += 1
		self._stop_expired()

	def humanize_velocity (self, dynamic: seqplay.events.Dynamic) -> int:

		"""Return the dynamic's velocity with jitter applied, clamped to 0-127.

		Jitter rounds halves up, like tick conversion.
		"""

		half = self._humanize_velocity / 2
		jitter = math.floor(self._rng.uniform(-half, half) + 0.5) if half > 0 else 0

		return max(seqplay.constants.MIN_VELOCITY, min(seqplay.constants.MAX_VELOCITY, dynamic.velocity + jitter))

	def _play_key (self, key: int, dynamic: seqplay.events.Dynamic, max_ticks: int) -> None:

		self._notes_on[key] = self._ticks_played + max_ticks
		velocity = self.humanize_velocity(dynamic)

		self._send(mido.Message('note_on', channel=self.channel, note=key, velocity=velocity))

	def _stop_key (self, key: int) -> None:

		self._notes_on[key] = None

		self._send(mido.Message('note_off', channel=self.channel, note=key, velocity=0))

	def _wait (self, ticks: int) -> None:

		duration = max(0.0, ticks * self._tick_duration + self._timeshift / 1000.0)

		half = self._humanize_ms / 2
		shift_ms = self._rng.uniform(-half, half) if half > 0 else 0.0
		self._timeshift = -shift_ms

		self._sleep(max(0.0, duration + shift_ms / 1000.0))

		self._ticks_played += ticks

	def _stop_expired (self) -> None:

		expired = [
			key for key, deadline in enumerate(self._notes_on)
			if deadline is not None and deadline < self._ticks_played
		]

		for key in expired:
			logger.debug(f"Key {key} passed its deadline at tick {self._ticks_played}, stopping")
			self._stop_key(key)

	def _send (self, message: mido.Message) -> None:

		"""
		Send a message to the output port, logging and dropping any failure.
		"""

		if self.midi_out is None:
			return

		try:
			self.midi_out.send(message)
		except Exception:
			logger.exception("MIDI send failed (device may be disconnected)")
