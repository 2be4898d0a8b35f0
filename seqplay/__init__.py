"""
seqplay - replay a MIDI file track to a live MIDI output.

A track is read once, reduced to a small stream of player events, and then
played in real time:

- **Tempo-normalized events.** File ticks are rescaled to a fixed player tick
  rate (``ticks_per_beat``), so a file at 96 PPQ and one at 960 PPQ, or an
  SMPTE file whose tick rate shifts with every tempo marker, all build the same
  kind of sequence.  Rests become ``Wait`` events and every note carries its
  length in player ticks.
- **Stable pacing with humanization.** Waits are slept with a hybrid
  sleep+spin clock.  Small random timing and velocity offsets keep the
  playback from sounding mechanical, and each timing offset is cancelled on
  the following wait so the tempo never drifts.
- **No stuck notes.** Every note gets a deadline; once it passes, the player
  stops the note whether or not a stop event arrived.  Notes with no declared
  length ring for at most four beats.
- **Generative variations.** Sequences can be fed to any model implementing
  ``GenerativeModel`` (an order-N Markov chain over events, for example) and
  regenerated into new sequences the player handles the same way.

Typical use:

```python
import threading

import seqplay

with open("song.mid", "rb") as f:
	sequence = seqplay.parse_sequence(f.read(), track_index=1, ticks_per_beat=12)

with seqplay.Player(bpm=110, ticks_per_beat=sequence.ticks_per_beat) as player:
	player.connect("Synth:Synth MIDI 1 20:0")
	seqplay.play_sequence(player, sequence, threading.Event())
```

Or from the command line::

	seqplay song.mid --port "Synth:Synth MIDI 1 20:0" --bpm 110 --monitor
"""

from seqplay.builder import build, parse_sequence
from seqplay.events import (
	Dynamic,
	Event,
	EventSequence,
	PlayNote,
	PlayNoteTicks,
	StopNote,
	Wait,
)
from seqplay.exceptions import (
	EmptySequence,
	MissingTrack,
	NoPortFound,
	NotConnected,
	ParseError,
	PortNotFound,
	SeqplayError,
)
from seqplay.generative import GenerativeModel, feed_sequence, regenerate
from seqplay.monitor import Monitor
from seqplay.playback import play_sequence
from seqplay.player import Player, PlayerSnapshot
from seqplay.timing import Metrical, Timecode, convert, raw_ticks_per_beat


__all__ = [
	"Dynamic",
	"EmptySequence",
	"Event",
	"EventSequence",
	"GenerativeModel",
	"Metrical",
	"MissingTrack",
	"Monitor",
	"NoPortFound",
	"NotConnected",
	"ParseError",
	"PlayNote",
	"PlayNoteTicks",
	"Player",
	"PlayerSnapshot",
	"PortNotFound",
	"SeqplayError",
	"StopNote",
	"Timecode",
	"Wait",
	"build",
	"convert",
	"feed_sequence",
	"parse_sequence",
	"play_sequence",
	"raw_ticks_per_beat",
	"regenerate",
]
