"""Coffee Chat: a Slack assistant for following up with people you meet."""

__version__ = "0.1.0"
