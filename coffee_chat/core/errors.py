"""Custom exception hierarchy for Coffee Chat."""


class CoffeeChatError(Exception):
    """Base error type."""


class ConfigError(CoffeeChatError):
    pass


class SlackError(CoffeeChatError):
    pass


class StorageError(CoffeeChatError):
    """Raised when the contact store cannot read or write."""
    pass


class CalendarError(CoffeeChatError):
    """Raised when calendar availability cannot be fetched."""
    pass


class TextGenerationError(CoffeeChatError):
    """Raised when the text generation provider call fails."""
    pass


class MissingSessionData(CoffeeChatError):
    """Raised when a pending interaction exists but its draft is unusable."""
    pass
