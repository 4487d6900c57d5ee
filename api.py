import uvicorn

from authcore.api.app import create_app
from authcore.logging_config import configure_logging
from config import ApplicationConfig

configure_logging(level=ApplicationConfig.LOG_LEVEL)

app = create_app(ApplicationConfig)

if __name__ == "__main__":
    uvicorn.run(
        "api:app",
        host=ApplicationConfig.API_HOST,
        port=ApplicationConfig.API_PORT,
        reload=True,
        log_level=ApplicationConfig.LOG_LEVEL.lower(),
    )
