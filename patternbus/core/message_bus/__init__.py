"""
Pattern-matching message bus

Key Features:
- Structural partial-match subscriptions (the empty pattern is a catch-all)
- Per-subscriber FIFO delivery with pull-based consumption
- Bounded retention, relaying to late consumers and timed cutover
"""

from .interface import (
    DEFAULT_FALLBACK_CUTOVER_MS,
    DEFAULT_RETENTION_MAX,
    BufferingState,
    BusConfig,
    LifecycleState,
    SubscriberOptions,
    TransformFailurePolicy,
)
from .matcher import is_mapping, match
from .retention import RetentionBuffer
from .channel import ChannelClosed, ChannelEmpty, DeliveryChannel
from .scheduler import AsyncioScheduler, Scheduler, TimerHandle
from .subscriber import Subscriber
from .bus import Bus
from .factory import (
    BusFactory,
    configure_global_bus,
    create_default_bus,
    get_bus_config,
    get_global_bus,
    set_global_bus,
    shutdown_global_bus,
)

__all__ = [
    # Records
    'DEFAULT_FALLBACK_CUTOVER_MS',
    'DEFAULT_RETENTION_MAX',
    'BufferingState',
    'BusConfig',
    'LifecycleState',
    'SubscriberOptions',
    'TransformFailurePolicy',

    # Matching
    'is_mapping',
    'match',

    # Building blocks
    'RetentionBuffer',
    'ChannelClosed',
    'ChannelEmpty',
    'DeliveryChannel',
    'AsyncioScheduler',
    'Scheduler',
    'TimerHandle',

    # Bus
    'Subscriber',
    'Bus',

    # Factory and globals
    'BusFactory',
    'configure_global_bus',
    'create_default_bus',
    'get_bus_config',
    'get_global_bus',
    'set_global_bus',
    'shutdown_global_bus',
]
