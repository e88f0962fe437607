"""VideoHub accounts: user credentials and session-token lifecycle."""

__version__ = "0.1.0"
