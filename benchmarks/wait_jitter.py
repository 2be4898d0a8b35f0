"""Wait jitter benchmark.

Sleeps one player tick at a time for a number of beats and measures how late
each wake-up is against its ideal time.

Usage:
    python benchmarks/wait_jitter.py [--bpm BPM] [--beats N] [--ticks-per-beat T]
                                     [--no-spin-wait] [--compare]

Options:
    --bpm BPM             Tempo in BPM (default: 120)
    --beats N             Number of beats to measure (default: 32)
    --ticks-per-beat T    Player ticks per quarter note (default: 12)
    --no-spin-wait        Use plain time.sleep instead of sleep+spin
    --compare             Run both modes and print a side-by-side comparison
"""

import argparse
import statistics
import sys
import time

import seqplay.player


def _run_benchmark (bpm: float, beats: int, ticks_per_beat: int, spin_wait: bool) -> list[float]:

	"""Sleep ``beats * ticks_per_beat`` ticks and return per-tick lateness (seconds)."""

	tick_seconds = 60.0 / bpm / ticks_per_beat
	sleep = seqplay.player.precise_sleep if spin_wait else time.sleep
	lateness: list[float] = []

	start = time.perf_counter()

	for tick in range(1, beats * ticks_per_beat + 1):
		target = start + tick * tick_seconds
		sleep(max(0.0, target - time.perf_counter()))
		lateness.append(time.perf_counter() - target)

	return lateness


def _summary (lateness: list[float]) -> dict[str, float]:

	ms = sorted(value * 1000 for value in lateness)

	return {
		"mean": statistics.mean(ms),
		"median": statistics.median(ms),
		"stdev": statistics.stdev(ms) if len(ms) > 1 else 0.0,
		"p95": ms[int(len(ms) * 0.95)],
		"p99": ms[int(len(ms) * 0.99)],
		"max": ms[-1],
	}


def _print_report (lateness: list[float], bpm: float, beats: int, ticks_per_beat: int, spin_wait: bool) -> None:

	if not lateness:
		print("No timing data collected.")
		return

	stats = _summary(lateness)
	mode = "spin-wait ON" if spin_wait else "spin-wait OFF"
	tick_ms = 60000.0 / bpm / ticks_per_beat

	print(f"\nWait Jitter Benchmark: {beats} beats at {bpm:.0f} BPM ({mode})")
	print("-" * 62)
	print(f"  Ticks measured  : {len(lateness)}")
	print(f"  Tick interval   : {tick_ms:.3f} ms  ({ticks_per_beat} ticks per beat)")
	print("-" * 62)

	for name, value in stats.items():
		print(f"  {name:<16}: {value:8.3f} ms")


def _print_comparison (spin: list[float], plain: list[float]) -> None:

	spin_stats = _summary(spin)
	plain_stats = _summary(plain)

	print(f"\n  {'':<10}{'spin ON':>12}{'spin OFF':>12}")
	print("-" * 36)

	for name in spin_stats:
		print(f"  {name:<10}{spin_stats[name]:>12.3f}{plain_stats[name]:>12.3f}")


def main () -> None:

	parser = argparse.ArgumentParser(description="Measure player wait jitter")
	parser.add_argument("--bpm", type=float, default=120.0)
	parser.add_argument("--beats", type=int, default=32)
	parser.add_argument("--ticks-per-beat", type=int, default=12)
	parser.add_argument("--no-spin-wait", action="store_true")
	parser.add_argument("--compare", action="store_true")
	args = parser.parse_args()

	if args.compare:
		spin = _run_benchmark(args.bpm, args.beats, args.ticks_per_beat, spin_wait=True)
		plain = _run_benchmark(args.bpm, args.beats, args.ticks_per_beat, spin_wait=False)
		_print_comparison(spin, plain)
		return

	spin_wait = not args.no_spin_wait
	lateness = _run_benchmark(args.bpm, args.beats, args.ticks_per_beat, spin_wait)
	_print_report(lateness, args.bpm, args.beats, args.ticks_per_beat, spin_wait)


if __name__ == "__main__":
	try:
		main()
	except KeyboardInterrupt:
		sys.exit(1)
