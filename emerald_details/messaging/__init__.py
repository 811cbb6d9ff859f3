from emerald_details.messaging.relay import MessageRelay, MessageSubscription

__all__ = ["MessageRelay", "MessageSubscription"]
