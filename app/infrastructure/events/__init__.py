"""Message bus adapters."""

from .consumer import KafkaEventConsumer, MessageHandler

__all__ = ["KafkaEventConsumer", "MessageHandler"]
