"""Entrypoint: run the retail analytics assistant server."""

import uvicorn

from retail_assistant.api.app import create_app
from retail_assistant.config.settings import Settings


def main() -> None:
    settings = Settings()
    app = create_app()
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
