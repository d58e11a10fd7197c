import logging

import pytest

from airband.channels import DeviceMode
from airband.devices import parse_devices
from airband.outputs import ConfigError, Mixer

FILE_OUT = {"type": "file", "directory": "/tmp/recordings", "filename_template": "rec"}


def _chan(freq, **extra):
    chan = {"freq": freq, "outputs": [dict(FILE_OUT)]}
    chan.update(extra)
    return chan


def _dev(**extra):
    dev = {
        "type": "rtlsdr",
        "sample_rate": 2560000,
        "centerfreq": 120000000,
        "channels": [_chan(120100000)],
    }
    dev.update(extra)
    return dev


def test_multichannel_device_parsed():
    devices = parse_devices([_dev()])
    assert len(devices) == 1
    dev = devices[0]
    assert dev.mode is DeviceMode.MULTICHANNEL
    assert dev.centerfreq == 120000000
    assert dev.sample_rate == 2560000
    assert len(dev.channels) == 1
    assert dev.channels[0].freqlist[0].frequency == 120100000
    assert dev.bins == dev.base_bins


def test_disabled_device_skipped():
    devices = parse_devices([_dev(disable=True), _dev(centerfreq=121000000)])
    assert [d.centerfreq for d in devices] == [121000000]


def test_missing_type_assumes_default(caplog):
    config = _dev()
    del config["type"]
    with caplog.at_level(logging.WARNING):
        devices = parse_devices([config])
    assert len(devices) == 1
    assert "rtlsdr" in caplog.text


def test_non_string_type_rejected():
    with pytest.raises(ConfigError, match="unsupported device type"):
        parse_devices([_dev(type=5)])


def test_invalid_mode_rejected():
    with pytest.raises(ConfigError, match="invalid mode"):
        parse_devices([_dev(mode="bogus")])


@pytest.mark.parametrize("rate", [1000, 8000])
def test_sample_rate_too_low(rate):
    with pytest.raises(ConfigError, match="sample_rate must be greater than 8000"):
        parse_devices([_dev(sample_rate=rate)])


def test_missing_centerfreq_in_multichannel():
    config = _dev()
    del config["centerfreq"]
    with pytest.raises(ConfigError, match="centerfreq"):
        parse_devices([config])


def test_no_channels_configured():
    with pytest.raises(ConfigError, match="no channels configured"):
        parse_devices([_dev(channels=[])])


def test_all_channels_disabled():
    with pytest.raises(ConfigError, match="no channels enabled"):
        parse_devices([_dev(channels=[_chan(120100000, disable=True)])])


def test_scan_mode_sets_centerfreq_above_first_freq():
    config = _dev(mode="scan", channels=[{"freqs": [118000000, 119000000], "outputs": [dict(FILE_OUT)]}])
    del config["centerfreq"]
    dev = parse_devices([config])[0]
    assert dev.mode is DeviceMode.SCAN
    assert dev.centerfreq > 118000000
    assert [f.frequency for f in dev.channels[0].freqlist] == [118000000, 119000000]


def test_scan_mode_allows_one_channel_only():
    chan = {"freqs": [118000000], "outputs": [dict(FILE_OUT)]}
    config = _dev(mode="scan", channels=[chan, dict(chan)])
    with pytest.raises(ConfigError, match="only one channel is allowed in scan mode"):
        parse_devices([config])


def test_tau_zero_disables_deemphasis():
    dev = parse_devices([_dev(tau=0)])[0]
    assert dev.alpha == 0.0
    assert dev.channels[0].alpha == 0.0


def test_tau_positive_gives_alpha_in_unit_range():
    dev = parse_devices([_dev(tau=200)])[0]
    assert 0.0 < dev.alpha < 1.0
    assert dev.channels[0].alpha == dev.alpha


def test_channel_connects_to_mixer():
    mixer = Mixer(name="mix1")
    chan = {"freq": 120100000, "outputs": [{"type": "mixer", "name": "mix1", "balance": 0.5}]}
    parse_devices([_dev(channels=[chan])], {"mix1": mixer})
    assert mixer.enabled is True
    assert len(mixer.inputs) == 1
    assert mixer.inputs[0].balance == 0.5


def test_unknown_mixer_rejected():
    chan = {"freq": 120100000, "outputs": [{"type": "mixer", "name": "nope"}]}
    with pytest.raises(ConfigError, match="unknown mixer"):
        parse_devices([_dev(channels=[chan])], {})


def test_string_sample_rate_with_suffix():
    dev = parse_devices([_dev(sample_rate="2.56M")])[0]
    assert dev.sample_rate == 2560000