# relay/constants.py
# Fixed response texts and header lists shared by the middleware and handlers

ONLINE_MESSAGE: str = "We are online!"
METHOD_NOT_ALLOWED: str = "Method Not Allowed"
INVALID_REQUEST: str = "Invalid request"

# Every method the catch-all answers with 405
ALL_METHODS: list[str] = [
    "GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS",
]

# Response headers that identify the server stack
IDENTIFYING_HEADERS: list[str] = [
    "X-Powered-By", "Server", "X-AspNet-Version", "X-AspNetMvc-Version",
    "X-Runtime", "X-Version", "Via",
]
