"""DriveMatch vehicle matching engine: similar-vehicle ranking and query advisor."""

__version__ = "1.0.0"
