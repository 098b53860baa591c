# relay/services/chat_expiry.py

import asyncio
from typing import Callable, Dict, List

from relay.utils.logger import log_info, log_exception


class ChatExpiryScheduler:
    """
    Deferred deletion of unclaimed chats, keyed by chat key.

    Every /send schedules one timer on the running event loop; /receive
    cancels whatever is still pending for its key. Timers live only as long
    as the process.
    """

    def __init__(self, delay: float = 60.0):
        self.delay = delay
        self._pending: Dict[str, List[asyncio.TimerHandle]] = {}

    def pending(self, key: str) -> int:
        """Number of timers still waiting for `key`."""
        return len(self._pending.get(key, []))

    def schedule(self, key: str, expire: Callable[[str], object]) -> asyncio.TimerHandle:
        """Call expire(key) after `delay` seconds unless cancelled first."""
        loop = asyncio.get_running_loop()
        handles = self._pending.setdefault(key, [])

        def _fire():
            handles.remove(handle)
            if not handles and self._pending.get(key) is handles:
                del self._pending[key]
            try:
                expire(key)
                log_info(f"Chat key expired after {self.delay}s")
            except Exception as e:
                log_exception(e, "ChatExpiryScheduler: expiry callback failed")

        handle = loop.call_later(self.delay, _fire)
        handles.append(handle)
        return handle

    def cancel(self, key: str) -> int:
        """Cancel every pending timer for `key`; returns how many were cancelled."""
        handles = self._pending.pop(key, [])
        for handle in handles:
            handle.cancel()
        return len(handles)

    def cancel_all(self) -> int:
        cancelled = 0
        for key in list(self._pending):
            cancelled += self.cancel(key)
        return cancelled
