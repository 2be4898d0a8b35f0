import pathlib
import typing

import mido
import pytest

import seqplay.__main__
import conftest


def _write_song (tmp_path: pathlib.Path) -> str:

	"""Write a two-track file with a short melody on track 1."""

	path = tmp_path / "song.mid"
	path.write_bytes(conftest.midi_bytes([
		[mido.MetaMessage('set_tempo', tempo=500000, time=0)],
		[
			mido.Message('note_on', note=60, velocity=90, time=0),
			mido.Message('note_off', note=60, velocity=0, time=240),
			mido.Message('note_on', note=64, velocity=90, time=240),
			mido.Message('note_off', note=64, velocity=0, time=480),
		],
	]))

	return str(path)


def test_list_ports (patch_midi: typing.List[conftest.FakeMidiOut], capsys: pytest.CaptureFixture[str]) -> None:

	assert seqplay.__main__.main(["--list-ports"]) == 0

	out = capsys.readouterr().out

	assert "Dummy MIDI" in out
	assert "Other Synth" in out


def test_plays_file (patch_midi: typing.List[conftest.FakeMidiOut], tmp_path: pathlib.Path) -> None:

	"""The whole track is played and the port is closed afterwards."""

	path = _write_song(tmp_path)

	code = seqplay.__main__.main([path, "--port", "Dummy MIDI", "--bpm", "6000", "--no-spin", "--humanize-ms", "0", "--humanize-velocity", "0"])

	assert code == 0

	port = patch_midi[0]
	notes_on = [message.note for message in port.sent if message.type == 'note_on']

	assert notes_on == [60, 64]
	assert port.sent[-1].type == 'note_off'
	assert port.close_count == 1


def test_unknown_port_fails (patch_midi: typing.List[conftest.FakeMidiOut], tmp_path: pathlib.Path) -> None:

	assert seqplay.__main__.main([_write_song(tmp_path), "--port", "Nope"]) == 1


def test_no_port_fails (patch_midi: typing.List[conftest.FakeMidiOut], tmp_path: pathlib.Path) -> None:

	assert seqplay.__main__.main([_write_song(tmp_path)]) == 1
	assert patch_midi == []


def test_missing_track_fails (patch_midi: typing.List[conftest.FakeMidiOut], tmp_path: pathlib.Path) -> None:

	assert seqplay.__main__.main([_write_song(tmp_path), "--port", "Dummy MIDI", "--track", "5"]) == 1


def test_missing_file_fails (patch_midi: typing.List[conftest.FakeMidiOut], tmp_path: pathlib.Path) -> None:

	assert seqplay.__main__.main([str(tmp_path / "missing.mid"), "--port", "Dummy MIDI"]) == 1


def test_no_file_given () -> None:

	assert seqplay.__main__.main([]) == 2


def test_config_file_supplies_port (patch_midi: typing.List[conftest.FakeMidiOut], tmp_path: pathlib.Path) -> None:

	config = tmp_path / "seqplay.yaml"
	config.write_text("midi:\n  port: \"Other Synth\"\nplayer:\n  bpm: 6000\n  humanize_ms: 0\n  spin_wait: false\n")

	assert seqplay.__main__.main([_write_song(tmp_path), "--config", str(config)]) == 0
	assert patch_midi[0].name == "Other Synth"


def test_invalid_config_value_fails (patch_midi: typing.List[conftest.FakeMidiOut], tmp_path: pathlib.Path) -> None:

	config = tmp_path / "seqplay.yaml"
	config.write_text("player:\n  bpm: -5\n")

	assert seqplay.__main__.main([_write_song(tmp_path), "--config", str(config), "--port", "Dummy MIDI"]) == 1
	assert patch_midi == []


@pytest.mark.parametrize("text", ["player:\n  bpm: fast\n", "just a string\n", "midi: [unclosed\n"])
def test_malformed_config_fails (patch_midi: typing.List[conftest.FakeMidiOut], tmp_path: pathlib.Path, text: str) -> None:

	config = tmp_path / "seqplay.yaml"
	config.write_text(text)

	assert seqplay.__main__.main([_write_song(tmp_path), "--config", str(config), "--port", "Dummy MIDI"]) == 1
	assert patch_midi == []
