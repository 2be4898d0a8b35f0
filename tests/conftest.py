import io
import struct
import typing

import mido
import pytest


class FakeMidiOut:

	"""MIDI output stub that records what it is sent."""

	def __init__ (self, name: str = "Dummy MIDI") -> None:

		"""Start with an empty message log."""

		self.name = name
		self.sent: typing.List[mido.Message] = []
		self.close_count = 0
		self.fail_sends = False


	def send (self, message: mido.Message) -> None:

		"""Record the message, or raise when failures are switched on."""

		if self.fail_sends:
			raise OSError("device unplugged")

		self.sent.append(message)


	def close (self) -> None:

		"""Count closes so tests can check it happens once."""

		self.close_count += 1


	@property
	def closed (self) -> bool:

		return self.close_count > 0


	def types (self) -> typing.List[str]:

		"""Return the message types sent so far, in order."""

		return [message.type for message in self.sent]


class FractionRng:

	"""Random stub whose ``uniform(a, b)`` returns ``a + (b - a) * fraction``.

	Fractions are taken from the list in order; the last one repeats.  A
	fraction of 0.5 lands in the middle of the window (no jitter for a
	symmetric range).
	"""

	def __init__ (self, *fractions: float) -> None:

		self.fractions = list(fractions) or [0.5]
		self.calls: typing.List[typing.Tuple[float, float]] = []

	def uniform (self, a: float, b: float) -> float:

		self.calls.append((a, b))
		fraction = self.fractions.pop(0) if len(self.fractions) > 1 else self.fractions[0]
		return a + (b - a) * fraction


class SleepRecorder:

	"""Sleep stub that records requested durations instead of blocking."""

	def __init__ (self, on_sleep: typing.Optional[typing.Callable[[float], None]] = None) -> None:

		self.durations: typing.List[float] = []
		self.on_sleep = on_sleep

	def __call__ (self, seconds: float) -> None:

		self.durations.append(seconds)

		if self.on_sleep is not None:
			self.on_sleep(seconds)


def _fake_get_output_names () -> list[str]:

	"""Return a fixed list of MIDI output names for tests."""

	return ["Dummy MIDI", "Other Synth"]


@pytest.fixture
def patch_midi (monkeypatch: pytest.MonkeyPatch) -> typing.List[FakeMidiOut]:

	"""Patch mido to use fake MIDI outputs.

	Returns the list of fake ports opened during the test, oldest first.
	"""

	opened: typing.List[FakeMidiOut] = []

	def fake_open_output (name: str) -> FakeMidiOut:

		port = FakeMidiOut(name)
		opened.append(port)
		return port

	monkeypatch.setattr(mido, "get_output_names", _fake_get_output_names)
	monkeypatch.setattr(mido, "open_output", fake_open_output)

	return opened


@pytest.fixture
def sleeps () -> SleepRecorder:

	"""A sleep stub for players under test."""

	return SleepRecorder()


def midi_bytes (tracks: typing.List[typing.List[typing.Union[mido.Message, mido.MetaMessage]]], ticks_per_beat: int = 480, file_type: int = 1) -> bytes:

	"""Serialize tracks of mido messages (``time`` = delta ticks) to SMF bytes."""

	mid = mido.MidiFile(type=file_type, ticks_per_beat=ticks_per_beat)

	for messages in tracks:
		track = mido.MidiTrack()
		track.extend(messages)
		mid.tracks.append(track)

	buffer = io.BytesIO()
	mid.save(file=buffer)

	return buffer.getvalue()


def smpte_midi_bytes (frames_per_second: int, subframes_per_frame: int, track_data: bytes) -> bytes:

	"""Build a one-track SMF with an SMPTE division from raw track bytes.

	``track_data`` must include its own end-of-track meta event.
	"""

	division = ((256 - frames_per_second) << 8) | subframes_per_frame
	header = b"MThd" + struct.pack(">IHHH", 6, 0, 1, division)
	track = b"MTrk" + struct.pack(">I", len(track_data)) + track_data

	return header + track
