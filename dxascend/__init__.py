"""DX-Ascend server: screen runtime composition on top of a SQLite project store."""

__version__ = "0.1.0"
