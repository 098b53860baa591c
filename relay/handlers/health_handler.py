# relay/handlers/health_handler.py

from fastapi import Request, Response

from relay.constants import ONLINE_MESSAGE
from relay.db.storage import Storage
from relay.utils.timing import now_ms


async def online(storage: Storage, request: Request, response: Response) -> dict:
    """GET / - liveness probe echoing the time spent since the request was stamped."""
    started = getattr(request.state, "request_time", None)
    elapsed = now_ms() - started if started is not None else 0
    response.status_code = 200
    return {
        "response": ONLINE_MESSAGE,
        "status": 200,
        "data": {"requestTime": elapsed},
    }
