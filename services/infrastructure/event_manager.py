#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# ============================================================================ #
# SeedFarm Economy (SFE) - Event Manager                                       #
# Copyright (c) 2025 MAX                                                       #
# Licensed under the MIT License                                               #
# ============================================================================ #

"""
Event Manager - decoupled notification of economy state changes.
Services emit events and listeners react without direct service-to-service calls.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger('sfe.events')

# Event types emitted by the economy service
REWARD_CLAIMED = "reward_claimed"
PACK_PURCHASED = "pack_purchased"
PACK_OPENED = "pack_opened"
ITEM_PLANTED = "item_planted"
ITEM_UNPLANTED = "item_unplanted"
ITEM_DISCARDED = "item_discarded"


@dataclass
class EventData:
    """Base event data structure."""
    event_type: str
    timestamp: datetime
    source_service: str
    data: Dict[str, Any]


class EventManager:
    """
    In-process event bus for economy events.

    Listener failures are logged and never propagate back into the emitting
    service, so a broken listener cannot undo a committed state change.
    """

    def __init__(self, max_history: int = 100):
        self.logger = logger.getChild(self.__class__.__name__)
        self._listeners: Dict[str, List[Callable[[EventData], None]]] = {}
        self._event_history: List[EventData] = []
        self._max_history = max_history

        self.logger.debug("Event manager initialized")

    def register_listener(self, event_type: str, callback: Callable[[EventData], None]) -> None:
        """Register a callback function to listen for specific event types."""
        self._listeners.setdefault(event_type, []).append(callback)
        self.logger.debug(f"Registered listener for event type: {event_type}")

    def unregister_listener(self, event_type: str, callback: Callable[[EventData], None]) -> bool:
        listeners = self._listeners.get(event_type, [])
        if callback in listeners:
            listeners.remove(callback)
            return True
        return False

    def emit_event(self, event_type: str, source_service: str, data: Optional[Dict[str, Any]] = None) -> EventData:
        """Emit an event to all registered listeners."""
        event_data = EventData(
            event_type=event_type,
            timestamp=datetime.now(timezone.utc),
            source_service=source_service,
            data=data or {},
        )

        self._event_history.append(event_data)
        if len(self._event_history) > self._max_history:
            self._event_history.pop(0)

        for callback in list(self._listeners.get(event_type, [])):
            try:
                callback(event_data)
            except (RuntimeError, ValueError, TypeError, KeyError) as e:
                self.logger.error(f"Error in event listener for {event_type}: {e}", exc_info=True)

        self.logger.debug(f"Event emitted: {event_type} from {source_service}")
        return event_data

    def get_history(self, event_type: Optional[str] = None) -> List[EventData]:
        if event_type is None:
            return list(self._event_history)
        return [event for event in self._event_history if event.event_type == event_type]

    def get_event_stats(self) -> Dict[str, Any]:
        """Get event system statistics for monitoring."""
        return {
            'registered_listeners': {
                event_type: len(listeners)
                for event_type, listeners in self._listeners.items()
            },
            'event_history_count': len(self._event_history),
            'recent_events': [
                {
                    'type': event.event_type,
                    'source': event.source_service,
                    'timestamp': event.timestamp.isoformat()
                }
                for event in self._event_history[-10:]
            ]
        }


# Singleton instance
_event_manager = None


def get_event_manager() -> EventManager:
    """Get or create the singleton Event Manager instance."""
    global _event_manager
    if _event_manager is None:
        _event_manager = EventManager()
    return _event_manager


def reset_event_manager() -> None:
    """Drop the singleton (tests)."""
    global _event_manager
    _event_manager = None
