"""Parsing of the ``devices`` configuration section."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from typing import Any, Optional

from airband.channels import Device, DeviceMode, parse_anynum2int, parse_channels
from airband.outputs import ConfigError

_log = logging.getLogger(__name__)

_DEFAULT_DEVICE_TYPE = "rtlsdr"


def _device_mode(value: Any, where: str) -> DeviceMode:
    text = str(value)
    if text.startswith("multichannel"):
        return DeviceMode.MULTICHANNEL
    if text.startswith("scan"):
        return DeviceMode.SCAN
    raise ConfigError(f'{where}: invalid mode (must be one of: "scan", "multichannel")')


def _check_type(settings: Mapping, where: str) -> str:
    if "type" not in settings:
        _log.warning(
            '%s: assuming device type "%s", please set "type" in the device section.',
            where, _DEFAULT_DEVICE_TYPE,
        )
        return _DEFAULT_DEVICE_TYPE
    kind = settings["type"]
    if not isinstance(kind, str) or not kind:
        raise ConfigError(f"{where}: unsupported device type")
    return kind


def _tau_to_alpha(tau: int, wave_rate: int) -> float:
    return 0.0 if tau == 0 else math.exp(-1.0 / (wave_rate * 1e-6 * tau))


def parse_devices(
    devs: Sequence[Mapping],
    mixers: Optional[Mapping] = None,
    fft_size: int = 512,
    wave_rate: int = 8000,
) -> list[Device]:
    """Parse the devices section and return the enabled devices.

    ``mixers`` maps mixer names to parsed mixers, so that channel outputs of
    type ``mixer`` can be connected to them.
    """
    result: list[Device] = []
    for i, settings in enumerate(devs):
        if "disable" in settings and bool(settings["disable"]):
            continue
        where = f"devices.[{i}]"
        _check_type(settings, where)

        dev = Device()
        if "sample_rate" not in settings:
            raise ConfigError(f"{where}: mandatory parameter missing: sample_rate")
        sample_rate = parse_anynum2int(settings["sample_rate"])
        if sample_rate <= wave_rate:
            raise ConfigError(f"{where}: sample_rate must be greater than {wave_rate}")
        dev.sample_rate = sample_rate

        dev.mode = _device_mode(settings["mode"], where) if "mode" in settings else DeviceMode.MULTICHANNEL
        if dev.mode is DeviceMode.MULTICHANNEL:
            if "centerfreq" not in settings:
                raise ConfigError(f"{where}: mandatory parameter missing: centerfreq")
            dev.centerfreq = parse_anynum2int(settings["centerfreq"])
        # In scan mode the centre frequency is derived from the channel's frequency list.

        if "tau" in settings:
            dev.alpha = _tau_to_alpha(int(settings["tau"]), wave_rate)

        chans = settings.get("channels", ())
        if len(chans) < 1:
            raise ConfigError(f"{where}: no channels configured")
        channels = parse_channels(chans, dev, i, mixers, fft_size, wave_rate)
        if not channels:
            raise ConfigError(f"{where}: no channels enabled")
        if dev.mode is DeviceMode.SCAN and len(channels) > 1:
            raise ConfigError(f"{where}: only one channel is allowed in scan mode")

        result.append(dev)
    return result