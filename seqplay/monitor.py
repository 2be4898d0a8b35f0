"""Live terminal status line for playback.

Runs a background thread that reads ``PlayerSnapshot`` objects from a queue
and redraws a single status line on stderr.  The playback thread only ever
puts snapshots on the queue, so the monitor never touches player state.

Log messages scroll above the status line without disruption.

The status line looks like::

	120.00 BPM  Tick: 384  Beat: 33.1  Events: 212  Sounding: C4 E4 G4
"""

import logging
import queue
import sys
import threading
import typing

import seqplay.player


_NOTE_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

_POLL_INTERVAL = 0.1


def note_name (pitch: int) -> str:

	"""Convert a MIDI note number to a human-readable name.

	Examples: 60 → ``"C4"``, 42 → ``"F#2"``, 36 → ``"C1"``.
	"""

	octave = (pitch // 12) - 1
	note = _NOTE_NAMES[pitch % 12]
	return f"{note}{octave}"


def format_status (snapshot: seqplay.player.PlayerSnapshot) -> str:

	"""Build the status string for one snapshot."""

	beat = snapshot.ticks_played // snapshot.ticks_per_beat + 1
	tick_in_beat = snapshot.ticks_played % snapshot.ticks_per_beat + 1

	parts: typing.List[str] = [
		f"{snapshot.bpm:.2f} BPM",
		f"Tick: {snapshot.ticks_played}",
		f"Beat: {beat}.{tick_in_beat}",
		f"Events: {snapshot.events_handled}",
	]

	if snapshot.sounding_keys:
		parts.append("Sounding: " + " ".join(note_name(key) for key in snapshot.sounding_keys))

	return "  ".join(parts)


class MonitorLogHandler (logging.Handler):

	"""Logging handler that clears and redraws the status line around log output.

	Installed by ``Monitor.start()`` and removed by ``Monitor.stop()``.
	"""

	def __init__ (self, monitor: "Monitor") -> None:

		"""Store reference to the monitor for clear/redraw calls."""

		super().__init__()
		self._monitor = monitor

	def emit (self, record: logging.LogRecord) -> None:

		"""Clear the status line, write the log message, then redraw."""

		try:
			with self._monitor.lock:
				self._monitor.clear_line()

				msg = self.format(record)
				sys.stderr.write(msg + "\n")
				sys.stderr.flush()

				self._monitor.draw()

		except Exception:
			self.handleError(record)


class Monitor:

	"""Background status line fed by player snapshots.

	Example:
		```python
		monitor = Monitor()
		monitor.start()

		play_sequence(player, sequence, cancel, progress=monitor.snapshots)

		monitor.stop()
		```
	"""

	def __init__ (self, snapshots: typing.Optional["queue.Queue[seqplay.player.PlayerSnapshot]"] = None) -> None:

		"""Create a stopped monitor.

		Parameters:
			snapshots: Queue to read from.  A new one is created when omitted;
				pass it to the playback loop as ``progress``.
		"""

		self.snapshots: "queue.Queue[seqplay.player.PlayerSnapshot]" = snapshots if snapshots is not None else queue.Queue()
		self.lock = threading.Lock()
		self.latest: typing.Optional[seqplay.player.PlayerSnapshot] = None

		self._thread: typing.Optional[threading.Thread] = None
		self._running: bool = False
		self._last_line: str = ""
		self._handler: typing.Optional[MonitorLogHandler] = None
		self._saved_handlers: typing.List[logging.Handler] = []

	def start (self) -> None:

		"""Install the log handler and start the drawing thread.

		A second call while running is a no-op.
		"""

		if self._running:
			return

		root_logger = logging.getLogger()
		self._saved_handlers = list(root_logger.handlers)
		self._handler = MonitorLogHandler(self)

		if self._saved_handlers and self._saved_handlers[0].formatter:
			self._handler.setFormatter(self._saved_handlers[0].formatter)
		else:
			self._handler.setFormatter(logging.Formatter("%(levelname)s:%(name)s:%(message)s"))

		root_logger.handlers.clear()
		root_logger.addHandler(self._handler)

		self._running = True
		self._thread = threading.Thread(
			target = self._run,
			name   = "seqplay-monitor",
			daemon = True,
		)
		self._thread.start()

	def stop (self) -> None:

		"""Stop the thread, clear the status line and restore log handlers."""

		if not self._running:
			return

		self._running = False

		if self._thread is not None:
			self._thread.join()
			self._thread = None

		with self.lock:
			self.clear_line()

		root_logger = logging.getLogger()
		root_logger.handlers.clear()

		for handler in self._saved_handlers:
			root_logger.addHandler(handler)

		self._saved_handlers = []
		self._handler = None

	def update (self, snapshot: seqplay.player.PlayerSnapshot) -> None:

		"""Record a snapshot and redraw."""

		with self.lock:
			self.latest = snapshot
			self._last_line = format_status(snapshot)
			self.draw()

	def draw (self) -> None:

		"""Write the current status line to the terminal."""

		if not self._last_line:
			return

		sys.stderr.write(f"\r\033[K{self._last_line}")
		sys.stderr.flush()

	def clear_line (self) -> None:

		"""Erase the status line."""

		sys.stderr.write("\r\033[K")
		sys.stderr.flush()

	def _run (self) -> None:

		while self._running:

			try:
				snapshot = self.snapshots.get(timeout=_POLL_INTERVAL)
			except queue.Empty:
				continue

			# Only the newest snapshot is worth drawing.
			while True:
				try:
					snapshot = self.snapshots.get_nowait()
				except queue.Empty:
					break

			self.update(snapshot)
