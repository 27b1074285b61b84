# src/epistemic_core/core/event_bus.py
"""
The channel every belief-revision step reports through.

Agents publish perceptions, belief formations and updates, frame changes
and discarded updates; resolution strategies publish exchanges and
outcomes; the scaffold publishes scorer fallbacks. Observers and exporters
subscribe. Belief state never depends on a subscriber: a handler that fails
is reported here and the publishing agent carries on.
"""

import asyncio
import inspect
import traceback
from collections import defaultdict
from typing import Any, Callable, Coroutine, Dict, Iterable, List, Optional, Set, Union, cast

EventHandler = Union[
    Callable[[Dict[str, Any]], None],
    Callable[[Dict[str, Any]], Coroutine[Any, Any, None]],
]


def _debug_enabled(config: Any) -> bool:
    """Reads ``simulation.enable_debug_logging`` from a config model or a plain dict."""
    if isinstance(config, dict):
        simulation = config.get("simulation") or {}
        return bool(simulation.get("enable_debug_logging", False)) if isinstance(simulation, dict) else False
    simulation = getattr(config, "simulation", None)
    return bool(getattr(simulation, "enable_debug_logging", False))


class EventBus:
    """
    Publish/subscribe hub for epistemic events.

    Plain handlers run inline, so an observer's history is up to date as soon
    as ``publish`` returns. Coroutine handlers (exporters, remote sinks) are
    scheduled as tasks; call ``flush`` at the end of a round to wait for them.
    Event types are stored by their string value, so ``EventType`` members
    and plain strings address the same subscribers.
    """

    def __init__(self, config: Optional[Any] = None) -> None:
        self._subscribers: Dict[str, List[EventHandler]] = defaultdict(list)
        self._pending_tasks: Set[asyncio.Task] = set()
        self.debug_logging = _debug_enabled(config)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._pending_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            print(f"ERROR IN ASYNC EVENT HANDLER: {type(error).__name__}: {error}")
            traceback.print_exception(type(error), error, error.__traceback__)

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        self._subscribers[str(event_type)].append(handler)

    def subscribe_many(self, event_types: Iterable[str], handler: EventHandler) -> None:
        """Subscribes one handler to several event types, e.g. ``ALL_EVENT_TYPES``."""
        for event_type in event_types:
            self.subscribe(event_type, handler)

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        handlers = self._subscribers.get(str(event_type), [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event_type: str, event_data: Dict[str, Any]) -> None:
        """
        Delivers an event dict to every handler of its type. Handler failures
        are printed and swallowed so that the publishing agent's update stands.
        """
        event_type = str(event_type)
        handlers = list(self._subscribers[event_type])
        if self.debug_logging:
            entity = event_data.get("entity_id", "?") if isinstance(event_data, dict) else "?"
            print(f"DEBUG: Publishing event '{event_type}' from '{entity}' to {len(handlers)} handler(s)")

        for handler in handlers:
            try:
                if inspect.iscoroutinefunction(handler):
                    task = asyncio.create_task(handler(event_data))
                    self._pending_tasks.add(task)
                    task.add_done_callback(self._on_task_done)
                else:
                    cast(Callable[[Dict[str, Any]], None], handler)(event_data)
            except Exception as e:
                print(
                    f"ERROR: Handler {getattr(handler, '__name__', 'unknown')} failed for event '{event_type}': {e}"
                )
                traceback.print_exc()

    @property
    def pending_count(self) -> int:
        return len(self._pending_tasks)

    async def flush(self, timeout: float = 10.0) -> None:
        """Waits for the async handlers scheduled so far, e.g. at the end of a round."""
        if not self._pending_tasks:
            return
        if self.debug_logging:
            print(f"DEBUG: Flushing {len(self._pending_tasks)} pending event handler task(s)")
        try:
            await asyncio.wait_for(
                asyncio.gather(*self._pending_tasks, return_exceptions=True),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            print(f"WARNING: Event bus flush timed out after {timeout} seconds; some handlers did not finish.")
