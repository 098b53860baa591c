# relay/routes/api_routes.py

from typing import Awaitable, Callable, Dict, Union

from fastapi import Request, Response

from relay.db.storage import Storage
from relay.handlers.chat_handler import receive, send
from relay.handlers.health_handler import online
from relay.handlers.session_handler import claim_session, create_session
from relay.handlers.user_handler import create_user, get_user

Handler = Callable[[Storage, Request, Response], Union[dict, Awaitable[dict]]]
RouteTable = Dict[str, Dict[str, Handler]]

# method -> exact path -> handler
ROUTES: RouteTable = {
    "get": {
        "/": online,
    },
    "post": {
        "/create": create_user,
        "/signup": create_user,
        "/user": get_user,
        "/invite": create_session,
        "/claim": claim_session,
        "/send": send,
        "/receive": receive,
    },
}
