"""YAML configuration.

Settings are read from a YAML file shaped like::

	midi:
	  port: "Synth:Synth MIDI 1 20:0"
	  channel: 0
	player:
	  bpm: 120
	  ticks_per_beat: 12
	  humanize_ms: 30
	  humanize_velocity: 12
	  spin_wait: true
	file:
	  track: 1

Every key is optional.  Command-line flags override the file, and the file
overrides the defaults below.
"""

import dataclasses
import logging
import os
import typing

import yaml

import seqplay.constants


logger = logging.getLogger(__name__)


_SECTIONS: typing.Dict[str, typing.Dict[str, type]] = {
	"midi": {"port": str, "channel": int},
	"player": {"bpm": float, "ticks_per_beat": int, "humanize_ms": float, "humanize_velocity": float, "spin_wait": bool},
	"file": {"track": int},
}


@dataclasses.dataclass
class PlayerConfig:

	"""
	Resolved settings for one playback run.
	"""

	port: typing.Optional[str] = None
	channel: int = seqplay.constants.DEFAULT_CHANNEL
	bpm: float = seqplay.constants.DEFAULT_BPM
	ticks_per_beat: int = seqplay.constants.DEFAULT_TICKS_PER_BEAT
	humanize_ms: float = seqplay.constants.HUMANIZE_MS_RANGE
	humanize_velocity: float = seqplay.constants.HUMANIZE_VELOCITY_RANGE
	spin_wait: bool = True
	track: int = 1


	def override (self, **values: typing.Any) -> "PlayerConfig":

		"""Return a copy with every non-None value replaced."""

		return dataclasses.replace(self, **{name: value for name, value in values.items() if value is not None})


def load_config (config_path: str = 'seqplay.yaml') -> dict:

	"""
	Load configuration from a YAML file.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return {}

	with open(config_path, 'r') as f:
		return yaml.safe_load(f) or {}


def _convert (section: str, key: str, value: typing.Any, kind: type) -> typing.Any:

	"""Convert one config value to its field type."""

	# YAML booleans would otherwise pass as 0 and 1.
	if isinstance(value, bool) != (kind is bool):
		raise ValueError(f"Config value {section}.{key} must be {kind.__name__}, got {value!r}")

	if kind is int and isinstance(value, float) and not value.is_integer():
		raise ValueError(f"Config value {section}.{key} must be a whole number, got {value!r}")

	try:
		return kind(value)
	except (TypeError, ValueError) as e:
		raise ValueError(f"Config value {section}.{key} must be {kind.__name__}, got {value!r}") from e


def config_from_dict (data: typing.Dict[str, typing.Any]) -> PlayerConfig:

	"""Flatten a loaded YAML mapping into a ``PlayerConfig``.

	Unknown sections and keys are logged and ignored.  Empty values keep the
	default; values of the wrong type raise ``ValueError``.
	"""

	if not isinstance(data, dict):
		raise ValueError("Config file must hold a mapping of sections")

	values: typing.Dict[str, typing.Any] = {}

	for section, entries in data.items():

		if section not in _SECTIONS:
			logger.warning(f"Unknown config section: {section!r}")
			continue

		if not isinstance(entries, dict):
			raise ValueError(f"Config section {section!r} must be a mapping")

		for key, value in entries.items():

			if key not in _SECTIONS[section]:
				logger.warning(f"Unknown config key: {section}.{key}")
				continue

			if value is None:
				continue

			values[key] = _convert(section, key, value, _SECTIONS[section][key])

	return PlayerConfig(**values)


def load_player_config (config_path: typing.Optional[str] = None) -> PlayerConfig:

	"""Load a ``PlayerConfig`` from a file, or the defaults when no path is given."""

	if config_path is None:
		return PlayerConfig()

	return config_from_dict(load_config(config_path))
