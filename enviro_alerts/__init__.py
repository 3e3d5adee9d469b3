"""Environmental risk alerts for geo-located push subscribers."""

__version__ = "1.0.0"
