"""
Event publishing for the Gateway Service.
"""

from .publisher import EventMessage, EventPublisher, utc_timestamp

__all__ = ["EventMessage", "EventPublisher", "utc_timestamp"]
