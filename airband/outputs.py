"""Output definitions and parsing of the ``outputs`` section of a channel or mixer."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, NamedTuple, Optional, Union

_log = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when the configuration is invalid."""


class OutputType(Enum):
    ICECAST = "icecast"
    FILE = "file"
    RAWFILE = "rawfile"
    MIXER = "mixer"
    UDP_STREAM = "udp_stream"
    PULSE = "pulse"


class TlsMode(Enum):
    DISABLED = "disabled"
    AUTO = "auto"
    AUTO_NO_PLAIN = "auto_no_plain"
    TRANSPORT = "transport"
    UPGRADE = "upgrade"


@dataclass
class IcecastData:
    hostname: str
    port: int
    mountpoint: str
    username: str
    password: str
    name: Optional[str] = None
    genre: Optional[str] = None
    description: Optional[str] = None
    send_scan_freq_tags: bool = False
    tls_mode: TlsMode = TlsMode.DISABLED


@dataclass
class FileData:
    type: OutputType
    basedir: str
    basename: str
    suffix: str
    dated_subdirectories: bool = False
    continuous: bool = False
    append: bool = True
    split_on_transmission: bool = False
    include_freq: bool = False


@dataclass
class MixerData:
    mixer: "Mixer"
    input: int


@dataclass
class UdpStreamData:
    dest_address: str
    dest_port: str
    continuous: bool = False


@dataclass
class PulseData:
    stream_name: str
    server: Optional[str] = None
    name: str = "rtl_airband"
    sink: Optional[str] = None
    continuous: bool = False


OutputData = Union[IcecastData, FileData, MixerData, UdpStreamData, PulseData]


@dataclass
class Output:
    type: OutputType
    data: OutputData
    has_mp3_output: bool = False
    enabled: bool = True
    active: bool = False


class _MixerInput(NamedTuple):
    ampfactor: float
    balance: float


@dataclass
class Mixer:
    """A named mixer combining channel audio into its own set of outputs."""

    name: str
    highpass: int = 100
    lowpass: int = 2500
    enabled: bool = False
    output_overrun_count: int = 0
    inputs: list = field(default_factory=list)
    outputs: list = field(default_factory=list)
    needs_raw_iq: bool = False
    has_iq_outputs: bool = False

    def connect_input(self, ampfactor: float, balance: float) -> int:
        """Register a new input and return its index."""
        if not -1.0 <= balance <= 1.0:
            raise ConfigError(f"balance {balance} out of allowed range <-1.0;1.0>")
        self.inputs.append(_MixerInput(float(ampfactor), float(balance)))
        self.enabled = True
        return len(self.inputs) - 1


# Type names are matched by prefix, in this order.
_TYPE_PREFIXES = (
    ("icecast", OutputType.ICECAST),
    ("file", OutputType.FILE),
    ("rawfile", OutputType.RAWFILE),
    ("mixer", OutputType.MIXER),
    ("udp_st", OutputType.UDP_STREAM),
    ("pulse", OutputType.PULSE),
)


def _where(i: int, j: int, o: int, parsing_mixers: bool) -> str:
    if parsing_mixers:
        return f"mixers.[{i}] outputs.[{o}]"
    return f"devices.[{i}] channels.[{j}] outputs.[{o}]"


def _require(setting: Mapping, key: str, where: str) -> Any:
    if key not in setting:
        raise ConfigError(f"{where}: missing {key}")
    return setting[key]


def _flag(setting: Mapping, key: str, default: bool = False) -> bool:
    return bool(setting[key]) if key in setting else default


def _output_type(kind: Any, where: str) -> OutputType:
    text = str(kind)
    for prefix, out_type in _TYPE_PREFIXES:
        if text.startswith(prefix):
            return out_type
    raise ConfigError(f"{where}: unknown output type")


def _parse_tls(out: Mapping, where: str) -> TlsMode:
    if "tls" not in out:
        return TlsMode.DISABLED
    value = out["tls"]
    if not isinstance(value, str):
        raise ConfigError(f"{where}: tls value must be a string")
    try:
        return TlsMode(value)
    except ValueError:
        raise ConfigError(
            f"{where}: invalid value for tls; must be one of: "
            "auto, auto_no_plain, transport, upgrade, disabled"
        ) from None


def _parse_icecast(out: Mapping, where: str) -> IcecastData:
    return IcecastData(
        hostname=str(_require(out, "server", where)),
        port=int(_require(out, "port", where)),
        mountpoint=str(_require(out, "mountpoint", where)),
        username=str(_require(out, "username", where)),
        password=str(_require(out, "password", where)),
        name=str(out["name"]) if "name" in out else None,
        genre=str(out["genre"]) if "genre" in out else None,
        description=str(out["description"]) if "description" in out else None,
        send_scan_freq_tags=_flag(out, "send_scan_freq_tags"),
        tls_mode=_parse_tls(out, where),
    )


def _parse_file(out: Mapping, out_type: OutputType, suffix: str, where: str) -> FileData:
    if "directory" not in out or "filename_template" not in out:
        raise ConfigError(f"{where}: both directory and filename_template required for file")
    return FileData(
        type=out_type,
        basedir=str(out["directory"]),
        basename=str(out["filename_template"]),
        suffix=suffix,
        dated_subdirectories=_flag(out, "dated_subdirectories"),
        continuous=_flag(out, "continuous"),
        append=_flag(out, "append", True),
        split_on_transmission=_flag(out, "split_on_transmission"),
        include_freq=_flag(out, "include_freq"),
    )


def _parse_mixer_output(out: Mapping, mixers: Optional[Mapping[str, Mixer]], where: str) -> MixerData:
    name = str(_require(out, "name", where))
    mixer = (mixers or {}).get(name)
    if mixer is None:
        raise ConfigError(f'{where}: unknown mixer "{name}"')
    ampfactor = float(out["ampfactor"]) if "ampfactor" in out else 1.0
    balance = float(out["balance"]) if "balance" in out else 0.0
    if balance < -1.0 or balance > 1.0:
        raise ConfigError(f"{where}: balance out of allowed range <-1.0;1.0>")
    try:
        index = mixer.connect_input(ampfactor, balance)
    except ConfigError as exc:
        raise ConfigError(f"{where}: could not connect to mixer {name}: {exc}") from None
    _log.debug("%s connected to mixer %s as input %d (ampfactor=%.1f balance=%.1f)",
               where, name, index, ampfactor, balance)
    return MixerData(mixer=mixer, input=index)


def _parse_udp_stream(out: Mapping, where: str) -> UdpStreamData:
    dest_address = str(_require(out, "dest_address", where))
    port = _require(out, "dest_port", where)
    dest_port = str(int(port)) if isinstance(port, int) and not isinstance(port, bool) else str(port)
    return UdpStreamData(
        dest_address=dest_address,
        dest_port=dest_port,
        continuous=_flag(out, "continuous"),
    )


def _parse_pulse(out: Mapping, channel: Any, parsing_mixers: bool, where: str) -> PulseData:
    if "stream_name" in out:
        stream_name = str(out["stream_name"])
    elif parsing_mixers:
        raise ConfigError(f"{where}: PulseAudio outputs of mixers must have stream_name defined")
    else:
        stream_name = f"{channel.freqlist[0].frequency / 1000000.0:.3f} MHz"
    return PulseData(
        stream_name=stream_name,
        server=str(out["server"]) if "server" in out else None,
        name=str(out["name"]) if "name" in out else "rtl_airband",
        sink=str(out["sink"]) if "sink" in out else None,
        continuous=_flag(out, "continuous"),
    )


def parse_outputs(
    outs: Sequence[Mapping],
    channel: Any,
    i: int,
    j: int,
    parsing_mixers: bool,
    mixers: Optional[Mapping[str, Mixer]] = None,
) -> list[Output]:
    """Parse an ``outputs`` list and return the enabled outputs.

    ``channel`` is the owning channel or mixer; raw file outputs mark it as
    needing raw I/Q data. ``mixers`` maps mixer names to already parsed mixers.
    """
    result: list[Output] = []
    for o, out in enumerate(outs):
        if _flag(out, "disable"):
            continue
        where = _where(i, j, o, parsing_mixers)
        out_type = _output_type(_require(out, "type", where), where)

        if out_type is OutputType.ICECAST:
            output = Output(out_type, _parse_icecast(out, where), has_mp3_output=True)

        elif out_type is OutputType.FILE:
            fdata = _parse_file(out, out_type, ".mp3", where)
            if fdata.split_on_transmission:
                if parsing_mixers:
                    raise ConfigError(f"{where}: split_on_transmission is not allowed for mixers")
                if fdata.continuous:
                    raise ConfigError(f"{where}: can't have both continuous and split_on_transmission")
            output = Output(out_type, fdata, has_mp3_output=True)

        elif out_type is OutputType.RAWFILE:
            if parsing_mixers:
                raise ConfigError(f"mixers.[{i}] outputs[{o}]: rawfile output is not allowed for mixers")
            fdata = _parse_file(out, out_type, ".cf32", where)
            channel.needs_raw_iq = True
            channel.has_iq_outputs = True
            if fdata.continuous and fdata.split_on_transmission:
                raise ConfigError(f"{where}: can't have both continuous and split_on_transmission")
            output = Output(out_type, fdata)

        elif out_type is OutputType.MIXER:
            if parsing_mixers:
                raise ConfigError(f"{where}: mixer output is not allowed for mixers")
            output = Output(out_type, _parse_mixer_output(out, mixers, where))

        elif out_type is OutputType.UDP_STREAM:
            output = Output(out_type, _parse_udp_stream(out, where))

        else:
            output = Output(out_type, _parse_pulse(out, channel, parsing_mixers, where))

        result.append(output)
    return result