from __future__ import annotations

import uvicorn

from config.settings import settings


def main() -> None:
    # log_config=None keeps uvicorn from replacing the JSON handler set up by create_app()
    uvicorn.run("app.api_service:app", host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    main()
