"""slashbridge: remote action definitions as slash commands."""

__version__ = "0.3.0"
