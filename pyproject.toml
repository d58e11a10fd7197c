[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "airband"
version = "0.1.0"
description = "Audio filters, CTCSS detection, FFT twiddle tables and configuration parsing for a multichannel airband receiver"
requires-python = ">=3.10"
dependencies = []
keywords = ["sdr", "airband", "ctcss", "dsp", "radio", "scanner", "goertzel"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Telecommunications Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Communications :: Ham Radio",
    "Topic :: Multimedia :: Sound/Audio :: Analysis",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["airband"]

[tool.pytest.ini_options]
addopts = "-ra"
