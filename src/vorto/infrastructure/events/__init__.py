from vorto.infrastructure.events.logging_event_publisher import LoggingEventPublisher

__all__ = ["LoggingEventPublisher"]
