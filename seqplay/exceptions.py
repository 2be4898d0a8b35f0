"""Errors raised by seqplay.

Every error here aborts the operation that raised it.  Nothing is retried.
Output write failures during playback are not errors at all: the player logs
and drops them.
"""


class SeqplayError (Exception):

	"""Base class for all seqplay errors."""


class ParseError (SeqplayError):

	"""The MIDI file bytes could not be read."""


class MissingTrack (SeqplayError):

	"""The requested track index does not exist in the file."""


class PortNotFound (SeqplayError):

	"""No MIDI output port matches the requested name."""


NoPortFound = PortNotFound


class NotConnected (SeqplayError):

	"""An output operation was attempted before ``connect()``."""


class EmptySequence (SeqplayError):

	"""A built or generated sequence has no events to play."""
