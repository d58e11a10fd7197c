"""Channel and device structures and parsing of a device's ``channels`` section."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from airband.filters import LowpassFilter, NotchFilter
from airband.outputs import ConfigError, Output, parse_outputs

_log = logging.getLogger(__name__)

_SOFT_BW_THRESHOLD = 0.9
_DEFAULT_NOTCH_Q = 10.0
_SCAN_DC_OFFSET_BINS = 20
_SUFFIXES = {"k": 1e3, "K": 1e3, "m": 1e6, "M": 1e6, "g": 1e9, "G": 1e9}


class Modulation(Enum):
    AM = "am"
    NFM = "nfm"


class DeviceMode(Enum):
    MULTICHANNEL = "multichannel"
    SCAN = "scan"


@dataclass
class FreqSettings:
    """Per-frequency settings of a channel."""

    frequency: int = 0
    label: Optional[str] = None
    agcavgfast: float = 0.5
    ampfactor: float = 1.0
    modulation: Modulation = Modulation.AM
    active_counter: int = 0
    squelch_threshold_dbfs: Optional[int] = None
    squelch_snr_threshold: Optional[float] = None
    ctcss_freq: Optional[float] = None
    notch_filter: NotchFilter = field(default_factory=NotchFilter)
    lowpass_filter: LowpassFilter = field(default_factory=LowpassFilter)


@dataclass
class Channel:
    """A demodulated channel of a device."""

    freqlist: list[FreqSettings]
    highpass: int = 100
    lowpass: int = 2500
    afc: int = 0
    freq_idx: int = 0
    alpha: float = 0.0
    outputs: list[Output] = field(default_factory=list)
    needs_raw_iq: bool = False
    has_iq_outputs: bool = False
    dm_dphi: int = 0
    dm_phi: float = 0.0

    @property
    def freq_count(self) -> int:
        return len(self.freqlist)


@dataclass
class Device:
    """A receiving device and the channels demodulated from it."""

    mode: DeviceMode = DeviceMode.MULTICHANNEL
    centerfreq: int = 0
    sample_rate: int = 0
    alpha: float = 0.0
    channels: list[Channel] = field(default_factory=list)
    bins: list[int] = field(default_factory=list)
    base_bins: list[int] = field(default_factory=list)


def _is_list(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _kind(value: Any) -> str:
    if _is_list(value):
        return "list"
    if isinstance(value, float):
        return "float"
    if _is_int(value):
        return "int"
    return type(value).__name__


def _atofs(text: str) -> float:
    """Parse a number with an optional k/M/G multiplier suffix; 0.0 if unparsable."""
    text = text.strip()
    multiplier = 1.0
    if text and text[-1] in _SUFFIXES:
        multiplier = _SUFFIXES[text[-1]]
        text = text[:-1]
    try:
        return float(text) * multiplier
    except ValueError:
        return 0.0


def parse_anynum2int(value: Any) -> int:
    """Convert an int (Hz), a float (MHz) or a string with a suffix to Hz."""
    if _is_int(value):
        return int(value)
    if isinstance(value, float):
        return int(value * 1e6)
    if isinstance(value, str):
        return int(_atofs(value))
    return 0


def mk_freqlist(n: int) -> list[FreqSettings]:
    """Return ``n`` frequency entries with default settings."""
    if n < 1:
        raise ConfigError(f"mk_freqlist: invalid list length {n}")
    return [FreqSettings() for _ in range(n)]


def _modulation(value: Any, where: str) -> Modulation:
    text = str(value)
    if text.startswith("nfm"):
        return Modulation.NFM
    if text.startswith("am"):
        return Modulation.AM
    raise ConfigError(f"{where}: unknown modulation")


def _warn_if_freq_not_in_range(i: int, j: int, freq: int, centerfreq: int, sample_rate: int) -> None:
    bw_limit = sample_rate / 2.0 * _SOFT_BW_THRESHOLD
    if abs(freq - centerfreq) >= bw_limit:
        _log.warning(
            "Warning: dev[%d].channel[%d]: frequency %.3f MHz is outside of SDR operating "
            "bandwidth (%.3f-%.3f MHz)",
            i, j, freq / 1e6, (centerfreq - bw_limit) / 1e6, (centerfreq + bw_limit) / 1e6,
        )


def _check_list_length(chan: Mapping, key: str, count: int, where: str, what: str) -> None:
    if key in chan and _is_list(chan[key]) and len(chan[key]) < count:
        raise ConfigError(f"{where}: {key} should be {what} with at least {count} elements")


def _parse_freqs(chan: Mapping, dev: Device, modulation: Modulation, where: str,
                 i: int, j: int, fft_size: int) -> list[FreqSettings]:
    if dev.mode is DeviceMode.MULTICHANNEL:
        freqlist = mk_freqlist(1)
        entry = freqlist[0]
        if "freq" not in chan:
            raise ConfigError(f"{where}: missing freq")
        entry.frequency = parse_anynum2int(chan["freq"])
        _warn_if_freq_not_in_range(i, j, entry.frequency, dev.centerfreq, dev.sample_rate)
        if "label" in chan:
            entry.label = str(chan["label"])
        entry.modulation = modulation
        return freqlist

    freqs = chan.get("freqs", ())
    if not _is_list(freqs) or len(freqs) < 1:
        raise ConfigError(f"{where}: freqs should be a list with at least one element")
    count = len(freqs)
    freqlist = mk_freqlist(count)
    if "labels" in chan and len(chan["labels"]) < count:
        raise ConfigError(f"{where}: labels should be a list with at least {count} elements")
    if "modulation" in chan and "modulations" in chan:
        raise ConfigError(f"{where}: can't set both modulation and modulations")
    if "modulations" in chan and len(chan["modulations"]) < count:
        raise ConfigError(f"{where}: modulations should be a list with at least {count} elements")

    for f, (entry, freq) in enumerate(zip(freqlist, freqs)):
        entry.frequency = parse_anynum2int(freq)
        if "labels" in chan:
            entry.label = str(chan["labels"][f])
        if "modulations" in chan:
            entry.modulation = _modulation(chan["modulations"][f], f"{where} modulations.[{f}]")
        else:
            entry.modulation = modulation

    # Tune 20 FFT bins higher to keep the DC spike away from the channel
    dev.centerfreq = int(freqlist[0].frequency + _SCAN_DC_OFFSET_BINS * float(dev.sample_rate // fft_size))
    return freqlist


def _apply_squelch_threshold(value: Any, freqlist: list[FreqSettings], where: str) -> None:
    if _is_list(value):
        thresholds = [int(v) for v in value[: len(freqlist)]]
    elif _is_int(value):
        thresholds = [int(value)] * len(freqlist)
    else:
        raise ConfigError("Invalid value for squelch_threshold (should be int or list - use parentheses)")
    for entry, threshold in zip(freqlist, thresholds):
        if threshold > 0:
            raise ConfigError(f"{where}: squelch_threshold must be less than or equal to 0")
        entry.squelch_threshold_dbfs = threshold


def _apply_snr_threshold(value: Any, freqlist: list[FreqSettings], where: str) -> None:
    if _is_list(value):
        snrs = []
        for item in value[: len(freqlist)]:
            if not (isinstance(item, float) or _is_int(item)):
                raise ConfigError(f"{where}: squelch_snr_threshold list must be of int or float")
            snrs.append(float(item))
    elif isinstance(value, float) or _is_int(value):
        snrs = [float(value)] * len(freqlist)
    else:
        raise ConfigError(
            "Invalid value for squelch_snr_threshold "
            "(should be float, int, or list of int/float - use parentheses)"
        )
    for entry, snr in zip(freqlist, snrs):
        if snr == -1.0:
            continue
        if snr < 0:
            raise ConfigError(f"{where}: squelch_snr_threshold must be greater than or equal to 0")
        entry.squelch_snr_threshold = snr


def _apply_notch(chan: Mapping, freqlist: list[FreqSettings], where: str, wave_rate: int) -> None:
    notch = chan["notch"]
    count = len(freqlist)
    if "notch_q" in chan and _kind(notch) != _kind(chan["notch_q"]):
        raise ConfigError(
            f"{where}: notch_q (if set) must be the same type as notch - "
            f"float or a list of floats with at least {count} elements"
        )
    if _is_list(notch):
        for f, entry in enumerate(freqlist):
            freq = float(notch[f])
            q = float(chan["notch_q"][f]) if "notch_q" in chan else _DEFAULT_NOTCH_Q
            if q == 0.0:
                q = _DEFAULT_NOTCH_Q
            elif q <= 0.0:
                raise ConfigError(f"{where} freq.[{f}]: invalid value for notch_q: {q} (must be greater than 0.0)")
            if freq == 0:
                continue
            if freq < 0:
                _log.warning("%s freq.[%d]: invalid value for notch: %s, ignoring", where, f, freq)
            else:
                entry.notch_filter = NotchFilter(freq, wave_rate, q)
    elif isinstance(notch, float):
        freq = notch
        q = float(chan["notch_q"]) if "notch_q" in chan else _DEFAULT_NOTCH_Q
        if q <= 0.0:
            raise ConfigError(f"{where}: invalid value for notch_q: {q} (must be greater than 0.0)")
        if freq < 0:
            _log.warning("%s: notch value '%s' invalid, ignoring", where, freq)
        elif freq > 0:
            for entry in freqlist:
                entry.notch_filter = NotchFilter(freq, wave_rate, q)
    else:
        raise ConfigError(f"{where}: notch should be an float or a list of floats with at least {count} elements")


def _apply_ctcss(value: Any, freqlist: list[FreqSettings], where: str) -> None:
    if _is_list(value):
        for f, entry in enumerate(freqlist):
            freq = float(value[f])
            if freq == 0:
                continue
            if freq < 0:
                _log.warning("%s freq.[%d]: invalid value for ctcss: %s, ignoring", where, f, freq)
            else:
                entry.ctcss_freq = freq
    elif isinstance(value, float):
        if value <= 0:
            _log.warning("%s: ctcss value '%s' invalid, ignoring", where, value)
            return
        for entry in freqlist:
            entry.ctcss_freq = value
    else:
        raise ConfigError(
            f"{where}: ctcss should be an float or a list of floats with at least {len(freqlist)} elements"
        )


def _apply_bandwidth(value: Any, freqlist: list[FreqSettings], where: str, wave_rate: int) -> None:
    if _is_list(value):
        bandwidths = [parse_anynum2int(v) for v in value[: len(freqlist)]]
    else:
        bandwidths = [parse_anynum2int(value)] * len(freqlist)
    for f, (entry, bandwidth) in enumerate(zip(freqlist, bandwidths)):
        if bandwidth == 0:
            continue
        if bandwidth < 0:
            _log.warning("%s freq.[%d]: bandwidth value '%d' invalid, ignoring", where, f, bandwidth)
        else:
            entry.lowpass_filter = LowpassFilter(bandwidth / 2, wave_rate)


def _apply_ampfactor(value: Any, freqlist: list[FreqSettings], where: str) -> None:
    if _is_list(value):
        factors = [float(v) for v in value[: len(freqlist)]]
    else:
        factors = [float(value)] * len(freqlist)
    for f, (entry, ampfactor) in enumerate(zip(freqlist, factors)):
        if ampfactor < 0:
            raise ConfigError(f"{where} freq.[{f}]: ampfactor '{ampfactor}' must not be negative")
        entry.ampfactor = ampfactor


def _tau_to_alpha(tau: int, wave_rate: int) -> float:
    return 0.0 if tau == 0 else math.exp(-1.0 / (wave_rate * 1e-6 * tau))


def _downmix_step(freq: int, centerfreq: int, sample_rate: int, wave_rate: int) -> int:
    """Phase increment of the downmixer, scaled to the 24-bit phase range."""
    offset = float(freq - centerfreq)
    decimation = sample_rate / wave_rate
    correction = wave_rate / 2.0
    correction *= decimation - math.floor(decimation + 0.5)
    correction *= offset / (sample_rate / 2.0)
    dphi = (offset - correction) / wave_rate
    dphi -= math.trunc(dphi)
    dphi *= 256.0 * 65536.0
    return int(dphi) & 0xFFFFFFFF


def parse_channels(
    chans: Sequence[Mapping],
    dev: Device,
    i: int,
    mixers: Optional[Mapping] = None,
    fft_size: int = 512,
    wave_rate: int = 8000,
) -> list[Channel]:
    """Parse a device's channels into ``dev`` and return the enabled channels.

    In scan mode this also sets ``dev.centerfreq`` from the first frequency.
    """
    channels: list[Channel] = []
    bins: list[int] = []
    for j, chan in enumerate(chans):
        if "disable" in chan and bool(chan["disable"]):
            continue
        where = f"devices.[{i}] channels.[{j}]"

        highpass = int(chan["highpass"]) if "highpass" in chan else 100
        lowpass = int(chan["lowpass"]) if "lowpass" in chan else 2500
        if 0 < lowpass < highpass:
            raise ConfigError(
                f"{where}: lowpass ({lowpass}) must be greater than or equal to highpass ({highpass})"
            )

        modulation = _modulation(chan["modulation"], where) if "modulation" in chan else Modulation.AM
        afc = int(chan["afc"]) & 0xFF if "afc" in chan else 0

        count = 1 if dev.mode is DeviceMode.MULTICHANNEL else len(chan.get("freqs", ()) or ())
        if count >= 1:
            _check_list_length(chan, "squelch_threshold", count, where, "an int or a list of ints")
            _check_list_length(chan, "squelch_snr_threshold", count, where,
                               "an int, a float or a list of ints or floats")
            _check_list_length(chan, "notch", count, where, "an float or a list of floats")
            _check_list_length(chan, "notch_q", count, where, "a float or a list of floats")
            _check_list_length(chan, "ctcss", count, where, "an float or a list of floats")

        freqlist = _parse_freqs(chan, dev, modulation, where, i, j, fft_size)
        channel = Channel(freqlist=freqlist, highpass=highpass, lowpass=lowpass, afc=afc, alpha=dev.alpha)

        if "squelch" in chan:
            _log.warning("Warning: 'squelch' no longer supported and will be ignored, "
                         "use 'squelch_threshold' or 'squelch_snr_threshold' instead")
        if "squelch_threshold" in chan and "squelch_snr_threshold" in chan:
            _log.warning("Warning: Both 'squelch_threshold' and 'squelch_snr_threshold' are set and may conflict")
        if "squelch_threshold" in chan:
            _apply_squelch_threshold(chan["squelch_threshold"], freqlist, where)
        if "squelch_snr_threshold" in chan:
            _apply_snr_threshold(chan["squelch_snr_threshold"], freqlist, where)
        if "notch" in chan:
            _apply_notch(chan, freqlist, where, wave_rate)
        if "ctcss" in chan:
            _apply_ctcss(chan["ctcss"], freqlist, where)
        if "bandwidth" in chan:
            channel.needs_raw_iq = True
            _apply_bandwidth(chan["bandwidth"], freqlist, where, wave_rate)
        if "ampfactor" in chan:
            _apply_ampfactor(chan["ampfactor"], freqlist, where)
        if "tau" in chan:
            channel.alpha = _tau_to_alpha(int(chan["tau"]), wave_rate)

        outputs = chan.get("outputs", ())
        if len(outputs) < 1:
            raise ConfigError(f"{where}: no outputs defined")
        channel.outputs = parse_outputs(outputs, channel, i, j, False, mixers)
        if not channel.outputs:
            raise ConfigError(f"{where}: no outputs defined")

        step = float(dev.sample_rate // fft_size)
        first = freqlist[0].frequency
        bins.append(int(math.ceil((first + dev.sample_rate - dev.centerfreq) / step - 1.0)) % fft_size)
        _log.debug("bins[%d]: %d", len(channels), bins[-1])

        if any(entry.modulation is Modulation.NFM for entry in freqlist):
            channel.needs_raw_iq = True

        if channel.needs_raw_iq:
            channel.dm_dphi = _downmix_step(first, dev.centerfreq, dev.sample_rate, wave_rate)
            channel.dm_phi = 0.0
            _log.debug("dev[%d].chan[%d]: dm_dphi=0x%x", i, len(channels), channel.dm_dphi)

        channels.append(channel)

    dev.channels = channels
    dev.bins = bins
    dev.base_bins = list(bins)
    return channels