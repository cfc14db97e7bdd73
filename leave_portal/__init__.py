"""Leave Portal - leave record lookup and append service."""

__version__ = "1.0.0"
