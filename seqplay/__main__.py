import argparse
import logging
import sys
import threading
import typing

import yaml

import seqplay.builder
import seqplay.config
import seqplay.exceptions
import seqplay.midi_utils
import seqplay.monitor
import seqplay.playback
import seqplay.player


logger = logging.getLogger(__name__)


def build_parser () -> argparse.ArgumentParser:

	"""
	Build the command-line argument parser.
	"""

	parser = argparse.ArgumentParser(prog="seqplay", description="Play one track of a MIDI file to a live MIDI output")
	parser.add_argument("file", nargs="?", help="Standard MIDI File to play")
	parser.add_argument("--list-ports", action="store_true", help="List MIDI output ports and exit")
	parser.add_argument("--config", help="YAML config file")
	parser.add_argument("--port", help="MIDI output port name (exact match)")
	parser.add_argument("--track", type=int, help="Track index to play (default: 1)")
	parser.add_argument("--bpm", type=float, help="Playback tempo (default: 120)")
	parser.add_argument("--ticks-per-beat", type=int, help="Player ticks per quarter note (default: 12)")
	parser.add_argument("--channel", type=int, help="MIDI output channel 0-15 (default: 0)")
	parser.add_argument("--humanize-ms", type=float, help="Timing jitter window in ms (default: 30)")
	parser.add_argument("--humanize-velocity", type=float, help="Velocity jitter window (default: 12)")
	parser.add_argument("--no-spin", dest="spin_wait", action="store_const", const=False, help="Use plain sleeps instead of sleep+spin")
	parser.add_argument("--loop", action="store_true", help="Repeat the track until interrupted")
	parser.add_argument("--monitor", action="store_true", help="Show a live status line")
	parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

	return parser


def play_file (config: seqplay.config.PlayerConfig, path: str, loop: bool = False, show_monitor: bool = False) -> int:

	"""Build the sequence for ``path`` and play it with the given settings.

	Playback runs on a worker thread.  Ctrl+C sets the cancellation flag, and
	the worker stops after its current event.  The player is closed on every
	exit path.

	Returns the number of events handled.
	"""

	if config.port is None:
		raise seqplay.exceptions.PortNotFound("No MIDI output port given (use --port or midi.port in the config)")

	with open(path, "rb") as f:
		data = f.read()

	sequence = seqplay.builder.parse_sequence(data, config.track, ticks_per_beat=config.ticks_per_beat)

	cancel = threading.Event()
	monitor = seqplay.monitor.Monitor() if show_monitor else None
	outcome: typing.Dict[str, typing.Any] = {"handled": 0, "error": None}

	with seqplay.player.Player(
		bpm = config.bpm,
		ticks_per_beat = sequence.ticks_per_beat,
		channel = config.channel,
		humanize_ms = config.humanize_ms,
		humanize_velocity = config.humanize_velocity,
		spin_wait = config.spin_wait
	) as player:

		player.connect(config.port)

		def run () -> None:

			try:
				outcome["handled"] = seqplay.playback.play_sequence(
					player,
					sequence,
					cancel,
					progress = monitor.snapshots if monitor is not None else None,
					loop = loop
				)
			except Exception as e:
				outcome["error"] = e

		worker = threading.Thread(target=run, name="seqplay-playback")

		if monitor is not None:
			monitor.start()

		try:
			worker.start()

			while worker.is_alive():
				try:
					worker.join(timeout=0.2)
				except KeyboardInterrupt:
					logger.info("Stopping...")
					cancel.set()

		finally:
			cancel.set()
			worker.join()

			if monitor is not None:
				monitor.stop()

	if outcome["error"] is not None:
		raise outcome["error"]

	return typing.cast(int, outcome["handled"])


def main (argv: typing.Optional[typing.List[str]] = None) -> int:

	"""
	Main entry point for the seqplay command.
	"""

	args = build_parser().parse_args(argv)

	logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

	if args.list_ports:
		for name in seqplay.midi_utils.list_output_names():
			print(name)
		return 0

	if args.file is None:
		logger.error("No MIDI file given")
		return 2

	try:
		config = seqplay.config.load_player_config(args.config).override(
			port = args.port,
			track = args.track,
			bpm = args.bpm,
			ticks_per_beat = args.ticks_per_beat,
			channel = args.channel,
			humanize_ms = args.humanize_ms,
			humanize_velocity = args.humanize_velocity,
			spin_wait = args.spin_wait
		)

		play_file(config, args.file, loop=args.loop, show_monitor=args.monitor)

	except seqplay.exceptions.SeqplayError as e:
		logger.error(str(e))
		return 1

	except OSError as e:
		logger.error(f"Could not read {args.file}: {e}")
		return 1

	except (ValueError, yaml.YAMLError) as e:
		logger.error(f"Invalid configuration: {e}")
		return 1

	return 0


if __name__ == "__main__":
	sys.exit(main())
