"""Parsing of the ``mixers`` configuration section."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from airband.outputs import ConfigError, Mixer, parse_outputs

_log = logging.getLogger(__name__)


def parse_mixers(mx: Mapping[str, Mapping]) -> dict[str, Mixer]:
    """Parse the mixers section, a mapping of mixer names to their settings.

    Returns the enabled mixers keyed by name, in configuration order.
    """
    result: dict[str, Mixer] = {}
    for i, (name, settings) in enumerate(mx.items()):
        if "disable" in settings and bool(settings["disable"]):
            continue
        if not isinstance(name, str) or not name:
            raise ConfigError(f"mixers.[{i}]: undefined mixer name")
        _log.debug("mm=%d name=%s", len(result), name)

        mixer = Mixer(
            name=name,
            highpass=int(settings["highpass"]) if "highpass" in settings else 100,
            lowpass=int(settings["lowpass"]) if "lowpass" in settings else 2500,
        )
        if 0 < mixer.lowpass < mixer.highpass:
            raise ConfigError(
                f"mixers.[{i}]: lowpass ({mixer.lowpass}) must be greater than "
                f"or equal to highpass ({mixer.highpass})"
            )

        outputs = settings.get("outputs", ())
        if len(outputs) < 1:
            raise ConfigError(f"mixers.[{i}]: no outputs defined")
        mixer.outputs = parse_outputs(outputs, mixer, i, 0, True, None)
        if not mixer.outputs:
            raise ConfigError(f"mixers.[{i}]: no outputs defined")

        result[name] = mixer
    return result