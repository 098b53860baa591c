# relay/utils/timing.py

import time


def now_ms() -> int:
    """Wall clock in epoch milliseconds; the unit of request.state.request_time."""
    return int(time.time() * 1000)
