"""tsdsprobe - round-trip checks for time-series datastreams."""

__version__ = "0.1.0"
