"""Filters, CTCSS detection, test signals, FFT twiddle tables and configuration parsing for an airband receiver."""

__version__ = "0.1.0"

__all__ = [
    "channels",
    "ctcss",
    "devices",
    "filters",
    "generate_signal",
    "helpers",
    "mixers",
    "outputs",
    "twiddles",
]