# relay/main.py

import uvicorn

import relay.config as config
from relay.main_fastapi import create_app
from relay.observability.logger import configure_logging
from relay.utils.logger import log_info


def main():
    """ Main entry point for the application startup. """
    # 0. Configure structured JSON logging as early as possible
    configure_logging(config.settings)

    # 1. Build the app; opening the database file fails fast here.
    app = create_app(config.settings)

    # 2. Serve. uvicorn handles SIGINT/SIGTERM and runs the lifespan shutdown.
    #    Server/Date headers are identifying; proxy headers are handled by the
    #    middleware chain according to TRUST_PROXY.
    log_info(f"Server starting at http://{config.HOST}:{config.PORT}")
    uvicorn.run(
        app,
        host=config.HOST,
        port=config.PORT,
        proxy_headers=False,
        server_header=False,
        date_header=False,
        log_config=None,
    )


if __name__ == "__main__":
    main()
