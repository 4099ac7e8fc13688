"""omikuji - storage layer for fortune slips and messages."""

__version__ = "0.1.0"
