"""Review moderation — review lifecycle, moderation workflow and statistics."""

__version__ = "0.1.0"
