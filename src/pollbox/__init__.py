"""pollbox - question and answer polling API."""

__version__ = "0.3.0"
