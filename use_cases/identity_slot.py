"""Single-writer, multi-reader holder for the currently resolved identity."""

import logging
from typing import Callable, List, Optional

from auth import SlotWriterError

from .session_models import Identity

log = logging.getLogger(__name__)

IdentityListener = Callable[[Optional[Identity]], None]


class IdentitySlot:
    """
    Readers call ``get`` or ``subscribe``. Exactly one owner may call
    ``claim_writer`` and publish through the returned ``SlotWriter``.
    """

    def __init__(self) -> None:
        self._value: Optional[Identity] = None
        self._listeners: List[IdentityListener] = []
        self._writer: Optional["SlotWriter"] = None

    def get(self) -> Optional[Identity]:
        return self._value

    def subscribe(self, listener: IdentityListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def claim_writer(self) -> "SlotWriter":
        if self._writer is not None:
            raise SlotWriterError("identity slot already has a writer")
        self._writer = SlotWriter(self)
        return self._writer

    def _store(self, value: Optional[Identity]) -> bool:
        if value == self._value:
            return False
        self._value = value
        return True

    def _notify(self) -> None:
        value = self._value
        for listener in list(self._listeners):
            try:
                listener(value)
            except Exception:
                log.exception("Identity slot listener failed")


class SlotWriter:
    def __init__(self, slot: IdentitySlot) -> None:
        self._slot = slot

    def store(self, value: Optional[Identity]) -> bool:
        """Write without notifying; returns True if the value changed."""
        return self._slot._store(value)

    def notify(self) -> None:
        self._slot._notify()

    def publish(self, value: Optional[Identity]) -> None:
        if self.store(value):
            self.notify()
