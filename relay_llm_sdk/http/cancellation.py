"""
Cooperative cancellation for in-flight calls.

A ``CancellationToken`` is passed into a call explicitly; the transport polls
it while the request is pending. Each transport call also gets its own
``CallHandle`` so that any in-flight call can be aborted independently.
The module keeps a registry of the most recently started call for hosts that
only ever abort "the current request".
"""

from __future__ import annotations

import threading
from typing import List, Optional


class CancellationToken:
    """A cooperative cancellation token with optional cascading semantics.

    Thread-safe for basic ``cancel`` + ``cancelled`` usage. Child tokens
    inherit cancellation when the parent is cancelled.
    """

    def __init__(self, *, parent: Optional["CancellationToken"] = None) -> None:
        self._cancelled = False
        self._reason: Optional[str] = None
        self._lock = threading.Lock()
        self._children: List[CancellationToken] = []
        if parent is not None:
            parent.link_child(self)

    @property
    def cancelled(self) -> bool:
        """Whether cancellation has been requested."""
        return self._cancelled

    @property
    def reason(self) -> Optional[str]:
        """Reason string supplied at cancel time (if any)."""
        return self._reason

    def cancel(self, reason: Optional[str] = None) -> None:
        """Request cooperative cancellation and cascade to children."""
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            self._reason = reason
            children = list(self._children)
        for child in children:
            child.cancel(reason)

    def link_child(self, token: "CancellationToken") -> "CancellationToken":
        """Link a child token so parent cancellation cascades (returns child)."""
        with self._lock:
            self._children.append(token)
            should_cancel = self._cancelled
            reason = self._reason
        if should_cancel:
            token.cancel(reason)
        return token

    def unlink_child(self, token: "CancellationToken") -> None:
        """Stop cascading to ``token`` (no-op if it is not linked)."""
        with self._lock:
            if token in self._children:
                self._children.remove(token)

    def child(self) -> "CancellationToken":
        """Create and link a child token (shortcut)."""
        return CancellationToken(parent=self)

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self._cancelled}, reason={self._reason!r})"


class CallHandle:
    """Abort handle of one transport call."""

    def __init__(self, url: str, parent: Optional[CancellationToken] = None) -> None:
        self.url = url
        self._parent = parent
        self.token = parent.child() if parent is not None else CancellationToken()

    @property
    def aborted(self) -> bool:
        return self.token.cancelled

    def abort(self, reason: str = "aborted") -> None:
        self.token.cancel(reason)

    def release(self) -> None:
        """Detach from the caller's token once the call is over."""
        if self._parent is not None:
            self._parent.unlink_child(self.token)
            self._parent = None


_current_handle: Optional[CallHandle] = None
_registry_lock = threading.Lock()


def register_call(handle: CallHandle) -> None:
    """Remember ``handle`` as the most recently started call."""
    global _current_handle
    with _registry_lock:
        _current_handle = handle


def unregister_call(handle: CallHandle) -> None:
    """Forget ``handle`` if it is still the most recent call."""
    global _current_handle
    with _registry_lock:
        if _current_handle is handle:
            _current_handle = None


def abort_current_request() -> bool:
    """
    Abort the most recently started in-flight call.

    Older concurrent calls are left alone; abort them through their own
    ``CallHandle``.

    Returns:
        True if a call was aborted
    """
    with _registry_lock:
        handle = _current_handle
    if handle is None:
        return False
    handle.abort("aborted by request")
    return True
