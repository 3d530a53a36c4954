from .publishers import InMemoryEventPublisher, LoggingEventPublisher

__all__ = ["InMemoryEventPublisher", "LoggingEventPublisher"]
