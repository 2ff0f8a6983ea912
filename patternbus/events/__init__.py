"""
Observer lists for subscriber notifications.
"""

from .events import EventEmitter, Listener

__all__ = [
    'EventEmitter',
    'Listener',
]
