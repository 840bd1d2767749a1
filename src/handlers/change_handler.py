"""Change-stream trigger entry point."""

from __future__ import annotations

from typing import Any

from handlers.responses import observer_response
from notify.change_observer import ChangeObserver


def handle_change_stream(
    event: Any,
    context: Any = None,
    observer: ChangeObserver | None = None,
) -> dict[str, object]:
    """Log every item of a change-stream delivery.

    Args:
        event: Stream delivery payload.
        context: Unused invocation context.
        observer: Optional observer; a default one is used when omitted.

    Returns:
        Status-and-body response; 207 when any item was malformed.

    Raises:
        MalformedEventError: If the delivery has no ``Records`` list.
    """
    active_observer = observer or ChangeObserver()
    return observer_response(active_observer.observe(event))
