# relay/routes/binder.py
"""
Binds the declarative route table into the FastAPI router.

Each (method, path, handler) gets a wrapper that runs the pre-hook, calls
handler(storage, request, response), turns application and storage errors
into JSON envelopes, then runs the post-hook with the final status. A
catch-all registered after every binding answers any other method/path
with 405.
"""

import inspect
from typing import Callable, List, Optional, Tuple

from fastapi import FastAPI, Request, Response

from relay.constants import ALL_METHODS
from relay.db.storage import Storage, StorageError
from relay.middleware.error_handler import AppError, ConflictError, RouteNotBound, StorageFailure
from relay.routes.api_routes import Handler, RouteTable
from relay.utils.logger import log_exception, log_info, log_request, log_response

BeforeHook = Callable[[Request, Response], None]
AfterHook = Callable[[Request, int], None]


async def method_not_allowed(request: Request):
    """Terminal responder for anything the route table does not bind."""
    log_info(f"{request.method} {request.url.path} → 405 (not bound)")
    return RouteNotBound().to_response()


class Server:
    """Owns the FastAPI app and injects the storage adapter into every handler."""

    def __init__(
        self,
        storage: Storage,
        app: Optional[FastAPI] = None,
        before: Optional[BeforeHook] = log_request,
        after: Optional[AfterHook] = log_response,
    ):
        self.storage = storage
        # No docs/openapi routes: every unbound path must reach the catch-all
        self.app = app or FastAPI(docs_url=None, redoc_url=None, openapi_url=None)
        self.before = before
        self.after = after
        self.bound: List[Tuple[str, str]] = []

    def bind(self, routes: RouteTable) -> FastAPI:
        """Register every route, then the 405 catch-all. Run once at startup."""
        for method, paths in routes.items():
            for path, handler in paths.items():
                log_info(f"Binding route: {method.upper()} {path}")
                self.app.add_api_route(
                    path,
                    self._wrap(handler),
                    methods=[method.upper()],
                    name=f"{method}:{path}",
                    include_in_schema=False,
                )
                self.bound.append((method.upper(), path))

        self.app.add_api_route(
            "/{path:path}",
            method_not_allowed,
            methods=ALL_METHODS,
            name="method_not_allowed",
            include_in_schema=False,
        )
        return self.app

    def _wrap(self, handler: Handler):
        async def endpoint(request: Request, response: Response):
            if self.before:
                self.before(request, response)

            status_code = 500
            try:
                result = handler(self.storage, request, response)
                if inspect.isawaitable(result):
                    result = await result
                status_code = result.status_code if isinstance(result, Response) else (response.status_code or 200)
                return result

            except AppError as e:
                status_code = e.status_code
                return e.to_response()

            except StorageError as e:
                if e.is_unique_violation:
                    # Uniqueness the handler did not anticipate
                    error = ConflictError("Already exists.")
                else:
                    log_exception(e, f"{request.method} {request.url.path}")
                    error = StorageFailure(e.message)
                status_code = error.status_code
                return error.to_response()

            finally:
                if self.after:
                    self.after(request, status_code)

        endpoint.__name__ = getattr(handler, "__name__", "endpoint")
        return endpoint
