"""execwrap - run commands and containers with timestamped logs and summaries."""

__version__ = "0.1.0"
