"""Uvicorn entry point for the cleaning service API"""

import uvicorn
from config import ApplicationConfig
from src.api.app import create_app

app = create_app(ApplicationConfig)


def main():
    uvicorn.run(
        "api:app",
        host=ApplicationConfig.API_HOST,
        port=int(ApplicationConfig.API_PORT),
        log_level=str(ApplicationConfig.LOG_LEVEL).lower(),
    )


if __name__ == "__main__":
    main()
