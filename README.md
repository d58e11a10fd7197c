# airband

Building blocks for a multichannel AM/NFM airband receiver: audio and I/Q
filters, CTCSS tone detection, synthetic test signals, FFT twiddle tables,
recording-directory helpers and parsing of the receiver's device, channel,
output and mixer configuration. Pure Python, no dependencies.

## Installation

```
pip install .
```

## Modules

### `airband.filters`

- `NotchFilter(notch_freq, sample_freq, q=10.0)`: second-order IIR notch.
  `apply(value)` filters one sample and returns the result.
- `LowpassFilter(freq, sample_freq)`: second-order Bessel lowpass for complex
  samples. `apply(r, j)` returns the filtered `(r, j)` pair.

A filter built without arguments, or with a frequency of zero or less, is
disabled (`enabled()` is `False`) and passes samples through unchanged.

### `airband.ctcss`

- `ToneDetector`: a Goertzel detector for one tone over a window of samples;
  `relative_power()`, `freq()` and `coefficient()` report its state.
- `ToneDetectorSet`: detectors fed with the same samples. `add()` refuses a
  tone that falls in the same bin as one already present and returns `False`;
  `sorted_powers()` returns the average power and a list of `PowerIndex`
  entries, strongest first.
- `CTCSS(ctcss_freq, sample_rate, window_size)`: after each full window,
  reports a tone when the wanted tone is the strongest of the standard tones
  (`CTCSS.standard_tones`, those within 5 Hz of the wanted one are left out)
  and above the average. `has_tone()`, `enough_samples()`, `found_count()`
  and `not_found_count()` give the result. `CTCSS()` with no arguments is
  disabled and always reports a tone.

### `airband.generate_signal`

`Tone`, `Noise` (gaussian, standard deviation 0.1 times the amplitude) and
`GenerateSignal`, which sums any number of them. `write_file(path, seconds)`
writes the samples as raw native 32-bit floats. `Tone.WEAK`, `NORMAL`,
`STRONG` and the same names on `Noise` are ready-made amplitudes.

### `airband.twiddles`

`twiddle_size(log2_n)` returns `(shared, unique, passes)` and
`twiddle_data(log2_n, direction)` returns the interleaved `(re, im)` table as
an `array('f')`, for FFT lengths 2**8 to 2**21 laid out for 8 parallel cores.
`direction` is `Direction.FWD` or `Direction.REV`. Other sizes raise
`ValueError`.

### `airband.helpers`

`dir_exists`, `file_exists`, `make_dir`, `make_subdirs(basedir, subdirs)` and
`make_dated_subdirs(basedir, time)`. The last creates `basedir/YYYY/MM/DD` for
a `datetime.date`, `datetime.datetime` or `time.struct_time` and returns the
path, or an empty string if it could not be created. `make_dir` and
`make_subdirs` return `True` or `False` and log failures.

### Configuration: `airband.outputs`, `airband.mixers`, `airband.channels`, `airband.devices`

These take a configuration already loaded into dicts and lists and build
dataclasses from it. Any invalid setting raises `ConfigError` (a
`ValueError`) with the position of the setting in its message.

- `parse_mixers(mx)` takes a mapping of mixer names to settings and returns
  the enabled `Mixer` objects keyed by name.
- `parse_devices(devs, mixers, fft_size=512, wave_rate=8000)` returns the
  enabled `Device` objects, each with its `Channel` list, FFT bins and, for
  channels that need raw I/Q, the downmixer phase step.
- `parse_channels` and `parse_outputs` do the same for one device's channels
  and one channel's or mixer's outputs.

Frequencies and sample rates may be given as an int (Hz), a float (MHz) or a
string with a `k`, `M` or `G` suffix (`parse_anynum2int`). Output types are
`icecast`, `file`, `rawfile`, `mixer`, `udp_stream` and `pulse`; device modes
are `multichannel` and `scan`; modulations are `am` and `nfm`.

## Examples

```python
from airband.ctcss import CTCSS
from airband.generate_signal import GenerateSignal, Tone

sample_rate = 8000
signal = GenerateSignal(sample_rate)
signal.add_tone(100.0, Tone.STRONG)

detector = CTCSS(100.0, sample_rate, 4000)
for _ in range(4000):
    detector.process_audio_sample(signal.get_sample())

print(detector.has_tone(), detector.found_count())
```

```python
from airband.devices import parse_devices
from airband.mixers import parse_mixers

mixers = parse_mixers({
    "mix1": {"outputs": [{"type": "file", "directory": "rec", "filename_template": "mix"}]},
})
devices = parse_devices(
    [{
        "type": "rtlsdr",
        "sample_rate": 2.56,
        "centerfreq": 120.0,
        "channels": [{"freq": 119.5, "outputs": [{"type": "mixer", "name": "mix1"}]}],
    }],
    mixers,
)
print(devices[0].channels[0].freqlist[0].frequency)  # 119500000
```

## What the package does not do

- It does not read configuration files; pass it data you have already loaded.
- It does not talk to SDR hardware, run FFTs or demodulate. The device
  `type` is only checked to be a non-empty string.
- Outputs are only described, not run: nothing streams to Icecast, UDP or
  PulseAudio, and nothing encodes or writes recordings beyond
  `GenerateSignal.write_file`.
- Squelch and CTCSS settings are stored per frequency as plain values; the
  package has no squelch state machine.
- There is no command-line program.

## Running the tests

```
pip install .[test]
pytest
```