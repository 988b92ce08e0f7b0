"""Simple Event Bus / Observer implementation for maintenance plan notifications.

Event names used so far:
  plan.imported       -> payload {"plan_id": str, "vehicle_type": str, "name": str, "summary": dict}
  plan.import_failed  -> payload {"vehicle_type": str, "error": dict}
  plan.matrix_edited  -> payload {"plan_id": str, "diff": dict}

Subscribers are callables taking (event_name, payload).
"""
from __future__ import annotations
import logging
from collections import defaultdict
from typing import Callable, Any, Dict, List

logger = logging.getLogger(__name__)

# --- Event name constants (used across modules) ---
PLAN_IMPORTED = "plan.imported"
PLAN_IMPORT_FAILED = "plan.import_failed"
PLAN_MATRIX_EDITED = "plan.matrix_edited"


Subscriber = Callable[[str, Any], None]


class EventBus:
	"""In-process observer bus; delivery is synchronous, in subscription order."""

	def __init__(self):
		self._subscribers: Dict[str, List[Subscriber]] = defaultdict(list)

	def subscribe(self, event_name: str, callback: Subscriber) -> Subscriber:
		"""Register callback once per event and return it."""
		callbacks = self._subscribers[event_name]
		if callback not in callbacks:
			callbacks.append(callback)
		return callback

	def unsubscribe(self, event_name: str, callback: Subscriber) -> bool:
		"""Remove callback; False when it was not subscribed."""
		callbacks = self._subscribers.get(event_name)
		if not callbacks or callback not in callbacks:
			return False
		callbacks.remove(callback)
		return True

	def subscriber_count(self, event_name: str) -> int:
		return len(self._subscribers.get(event_name, ()))

	def publish(self, event_name: str, payload: Any) -> int:
		"""Deliver to every subscriber; returns how many handled it without raising."""
		delivered = 0
		for cb in list(self._subscribers.get(event_name, ())):
			try:
				cb(event_name, payload)
			except Exception:
				# The plan operation that published the event has already succeeded
				logger.exception("Error delivering %s to %r", event_name, cb)
			else:
				delivered += 1
		logger.debug("Published %s to %d subscriber(s)", event_name, delivered)
		return delivered


# A singleton-like instance (can be imported)
GLOBAL_EVENT_BUS = EventBus()


def publish(event_name: str, payload: Any = None) -> int:
	"""Publish an event on the global bus (sugar function)."""
	return GLOBAL_EVENT_BUS.publish(event_name, payload)


__all__ = [
	'EventBus', 'Subscriber', 'GLOBAL_EVENT_BUS', 'publish',
	'PLAN_IMPORTED', 'PLAN_IMPORT_FAILED', 'PLAN_MATRIX_EDITED'
]
