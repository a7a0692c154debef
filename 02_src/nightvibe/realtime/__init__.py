"""Realtime channel module."""

from .channel import ChannelState, IRealtimeChannel, RealtimeChannel, create_socket_client
from .registry import (
    OutboundEvent,
    RealtimeEvent,
    RealtimeHandler,
    SubscriberRegistry,
    Unsubscribe,
)

__all__ = [
    "ChannelState",
    "IRealtimeChannel",
    "RealtimeChannel",
    "create_socket_client",
    "OutboundEvent",
    "RealtimeEvent",
    "RealtimeHandler",
    "SubscriberRegistry",
    "Unsubscribe",
]
