"""Optional third-party services used to build draft messages."""

from .calendar_client import CalendarClient, compute_free_slots
from .text_generation import TopicGenerator, has_meaningful_context

__all__ = ["CalendarClient", "TopicGenerator", "compute_free_slots", "has_meaningful_context"]
