"""songshare - share music across streaming platforms from Slack."""

__version__ = "0.1.0"
