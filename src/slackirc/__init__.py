"""slackirc: relay between an IRC network and Slack."""

__version__ = "0.1.0"
