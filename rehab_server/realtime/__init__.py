"""Live update plumbing: subscription handles and debounced queries."""
from rehab_server.realtime.subscriptions import (
    Subscription, SubscriptionGroup, SubscriptionHub,
    get_subscription_hub, reset_subscription_hub,
    messages_topic, user_chat_rooms_topic, typing_topic
)
from rehab_server.realtime.debounce import DebouncedSearch

__all__ = [
    'Subscription', 'SubscriptionGroup', 'SubscriptionHub',
    'get_subscription_hub', 'reset_subscription_hub',
    'messages_topic', 'user_chat_rooms_topic', 'typing_topic',
    'DebouncedSearch'
]
