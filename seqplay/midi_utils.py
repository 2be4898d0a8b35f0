import logging
import typing
import mido

import seqplay.exceptions

logger = logging.getLogger(__name__)

def list_output_names() -> typing.List[str]:
    """
    Return the names of all available MIDI output ports.
    """
    outputs = list(mido.get_output_names())
    logger.debug(f"Available MIDI outputs: {outputs}")
    return outputs


def open_output_device(device_name: str) -> typing.Any:
    """
    Open a MIDI output port by exact name.

    Unlike a fuzzy or auto-selecting lookup, the name must match one of the
    names reported by ``mido.get_output_names()`` character for character.

    Raises:
        PortNotFound: when no available port has that name.

    Returns:
        The open ``mido`` output port.
    """
    outputs = list_output_names()

    if device_name not in outputs:
        raise seqplay.exceptions.PortNotFound(
            f"MIDI output device '{device_name}' not found. "
            f"Available devices: {outputs}"
        )

    midi_out = mido.open_output(device_name)
    logger.info(f"Opened MIDI output: {device_name}")
    return midi_out
