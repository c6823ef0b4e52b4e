# save_organizer/core/signals.py
from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable

from PyQt6.QtCore import QObject, Qt, pyqtSignal

from save_organizer.utils.logger_utils import logger


class EventKind(Enum):
    """Every state transition the organizer announces. Values are signal names."""

    CHANGED_TO_GAME = "changed_to_game"
    CHANGED_TO_PROFILE = "changed_to_profile"
    PROFILE_CREATED = "profile_created"
    PROFILE_RENAMED = "profile_renamed"
    PROFILE_DELETED = "profile_deleted"
    PROFILE_DIRECTORY_CHANGED = "profile_directory_changed"
    SAVE_LOCATION_CHANGED = "save_location_changed"
    ENTRY_CREATED = "entry_created"
    ENTRY_RENAMED = "entry_renamed"
    ENTRY_SELECTED = "entry_selected"
    ENTRY_DELETED = "entry_deleted"
    ENTRIES_REFRESHED = "entries_refreshed"
    SAVE_LOAD_STARTED = "save_load_started"
    SAVE_LOAD_FINISHED = "save_load_finished"
    GAME_FILE_WRITABLE_STATE_CHANGED = "game_file_writable_state_changed"
    SETTING_CHANGED = "setting_changed"


@dataclass(frozen=True)
class Event:
    """A single notification: the kind tags how to read the payload."""

    kind: EventKind
    payload: Any = None


@dataclass(frozen=True)
class ListenerFailure:
    """Records a listener that raised while an event was being delivered."""

    listener: Any
    event: Event
    error: Exception


class EventHub(QObject):
    """
    Typed publish/subscribe register for organizer state changes.

    Each EventKind has its own signal channel, so a listener only receives
    the kinds it declared interest in. Delivery is synchronous and follows
    registration order. A listener that raises is logged and reported, and
    the remaining listeners still receive the event.

    Listeners are either callables taking an Event, or objects with an
    ``on_event(event)`` method and an optional ``interests`` attribute.
    """

    # --- One channel per event kind. Emits: Event ---
    changed_to_game = pyqtSignal(object)
    changed_to_profile = pyqtSignal(object)
    profile_created = pyqtSignal(object)
    profile_renamed = pyqtSignal(object)
    profile_deleted = pyqtSignal(object)
    profile_directory_changed = pyqtSignal(object)
    save_location_changed = pyqtSignal(object)
    entry_created = pyqtSignal(object)
    entry_renamed = pyqtSignal(object)
    entry_selected = pyqtSignal(object)
    entry_deleted = pyqtSignal(object)
    entries_refreshed = pyqtSignal(object)
    save_load_started = pyqtSignal(object)
    save_load_finished = pyqtSignal(object)
    game_file_writable_state_changed = pyqtSignal(object)
    setting_changed = pyqtSignal(object)

    # --- Diagnostics ---
    # Emits: event (Event), error (Exception)
    # Connect through subscribe_failures(); a raising slot connected directly
    # is reported by PyQt6 as an unhandled exception.
    listener_failed = pyqtSignal(object, object)

    def __init__(self):
        super().__init__()
        # listener -> list of (kind, connected wrapper), in registration order
        self._subscriptions: dict[Any, list[tuple[EventKind, Callable]]] = {}
        self._failure_handlers: dict[Any, Callable] = {}
        # Per thread, so deliveries running on different threads keep their own failures
        self._local = threading.local()

    # --- Subscription ---

    def subscribe(self, listener: Any, kinds: Iterable[EventKind] | None = None):
        """
        Registers a listener for the given kinds. If kinds is None, the
        listener's ``interests`` attribute is used, falling back to all kinds.
        Subscribing the same listener twice is ignored.
        """
        if listener in self._subscriptions:
            logger.debug(f"Listener {listener!r} is already subscribed. Ignoring.")
            return

        callback = getattr(listener, "on_event", None) or listener
        if not callable(callback):
            raise TypeError(f"Listener {listener!r} is neither callable nor has on_event().")

        if kinds is None:
            kinds = getattr(listener, "interests", None) or list(EventKind)
        # Keep declaration order stable and drop duplicates
        kinds = list(dict.fromkeys(kinds))

        connections = []
        for kind in kinds:
            wrapper = self._guard(listener, callback)
            self._channel(kind).connect(wrapper, type=Qt.ConnectionType.DirectConnection)
            connections.append((kind, wrapper))

        self._subscriptions[listener] = connections
        logger.debug(
            f"Subscribed {listener!r} to {[k.value for k in kinds]}"
        )

    def unsubscribe(self, listener: Any):
        """Removes a listener from every channel it was registered on."""
        connections = self._subscriptions.pop(listener, None)
        if not connections:
            return
        for kind, wrapper in connections:
            try:
                self._channel(kind).disconnect(wrapper)
            except TypeError:
                logger.warning(f"Listener {listener!r} was not connected to '{kind.value}'.")
        logger.debug(f"Unsubscribed {listener!r}")

    def subscribe_failures(self, handler: Callable[[Event, Exception], Any]):
        """
        Connects a handler to `listener_failed`. Exceptions raised by the
        handler are logged and go no further.
        """
        if handler in self._failure_handlers:
            return

        def deliver(event: Event, error: Exception):
            try:
                handler(event, error)
            except Exception as e:
                logger.error(f"Failure handler {handler!r} raised: {e}", exc_info=True)

        self.listener_failed.connect(deliver, type=Qt.ConnectionType.DirectConnection)
        self._failure_handlers[handler] = deliver

    def unsubscribe_failures(self, handler: Callable[[Event, Exception], Any]):
        deliver = self._failure_handlers.pop(handler, None)
        if deliver is None:
            return
        try:
            self.listener_failed.disconnect(deliver)
        except TypeError:
            logger.warning(f"Failure handler {handler!r} was not connected.")

    def clear(self):
        """Removes every listener. Used when the organizer is closed."""
        for listener in list(self._subscriptions):
            self.unsubscribe(listener)
        for handler in list(self._failure_handlers):
            self.unsubscribe_failures(handler)

    def is_subscribed(self, listener: Any) -> bool:
        return listener in self._subscriptions

    # --- Publishing ---

    def publish(self, kind: EventKind, payload: Any = None) -> list[ListenerFailure]:
        """Delivers one event and returns the failures raised by listeners."""
        return self._deliver(Event(kind, payload))

    def publish_all(self, events: Iterable[Event]) -> list[ListenerFailure]:
        """Delivers a staged list of events in order."""
        failures: list[ListenerFailure] = []
        for event in events:
            failures.extend(self._deliver(event))
        return failures

    def _deliver(self, event: Event) -> list[ListenerFailure]:
        logger.debug(f"Publishing '{event.kind.value}' with payload {event.payload!r}")
        # A stack, because listeners may publish while being notified
        stack = self._failure_stack()
        stack.append([])
        try:
            self._channel(event.kind).emit(event)
        finally:
            failures = stack.pop()
        return failures

    def _channel(self, kind: EventKind):
        return getattr(self, kind.value)

    def _failure_stack(self) -> list[list[ListenerFailure]]:
        if not hasattr(self._local, "failures"):
            self._local.failures = []
        return self._local.failures

    def _guard(self, listener: Any, callback: Callable[[Event], Any]) -> Callable:
        """Wraps a listener so its exceptions are contained and reported."""

        def deliver(event: Event):
            try:
                callback(event)
            except Exception as e:
                logger.error(
                    f"Listener {listener!r} failed while handling '{event.kind.value}': {e}",
                    exc_info=True,
                )
                failure = ListenerFailure(listener=listener, event=event, error=e)
                stack = self._failure_stack()
                if stack:
                    stack[-1].append(failure)
                self.listener_failed.emit(event, e)

        return deliver
