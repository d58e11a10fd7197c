import pytest

from airband.mixers import parse_mixers
from airband.outputs import ConfigError, OutputType


def file_out(**extra):
    cfg = {"type": "file", "directory": "/tmp/rec", "filename_template": "mix"}
    cfg.update(extra)
    return cfg


def test_parse_basic_mixer_defaults():
    result = parse_mixers({"main": {"outputs": [file_out()]}})
    assert list(result) == ["main"]
    mixer = result["main"]
    assert mixer.name == "main"
    assert mixer.highpass == 100
    assert mixer.lowpass == 2500
    assert mixer.enabled is False
    assert mixer.inputs == []
    assert [o.type for o in mixer.outputs] == [OutputType.FILE]


def test_order_preserved_and_disabled_skipped():
    cfg = {
        "b": {"outputs": [file_out()]},
        "skip": {"disable": True, "outputs": [file_out()]},
        "a": {"outputs": [file_out()]},
    }
    assert list(parse_mixers(cfg)) == ["b", "a"]


def test_custom_filters():
    result = parse_mixers({"m": {"highpass": 300, "lowpass": 3000, "outputs": [file_out()]}})
    assert (result["m"].highpass, result["m"].lowpass) == (300, 3000)


def test_lowpass_below_highpass_rejected():
    with pytest.raises(ConfigError, match="lowpass"):
        parse_mixers({"m": {"highpass": 500, "lowpass": 400, "outputs": [file_out()]}})


def test_lowpass_disabled_allows_any_highpass():
    result = parse_mixers({"m": {"highpass": 500, "lowpass": 0, "outputs": [file_out()]}})
    assert result["m"].lowpass == 0


def test_no_outputs():
    with pytest.raises(ConfigError, match="no outputs defined"):
        parse_mixers({"m": {"outputs": []}})


def test_all_outputs_disabled():
    with pytest.raises(ConfigError, match="no outputs defined"):
        parse_mixers({"m": {"outputs": [file_out(disable=True)]}})


def test_rawfile_not_allowed():
    raw = {"type": "rawfile", "directory": "/tmp", "filename_template": "x"}
    with pytest.raises(ConfigError, match="rawfile output is not allowed"):
        parse_mixers({"m": {"outputs": [raw]}})


def test_mixer_output_not_allowed():
    with pytest.raises(ConfigError, match="mixer output is not allowed"):
        parse_mixers({"m": {"outputs": [{"type": "mixer", "name": "m"}]}})


def test_empty_name_rejected():
    with pytest.raises(ConfigError, match="undefined mixer name"):
        parse_mixers({"": {"outputs": [file_out()]}})


def test_error_index_counts_disabled():
    cfg = {
        "off": {"disable": True},
        "bad": {"outputs": []},
    }
    with pytest.raises(ConfigError) as excinfo:
        parse_mixers(cfg)
    assert str(excinfo.value).startswith("mixers.[1]:")