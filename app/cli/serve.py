import uvicorn

from app.config import settings
from app.database import Base, engine
from app.logger import setup_logging
from app.models import Share  # noqa: F401  registers the table


def main():
    setup_logging()
    Base.metadata.create_all(bind=engine)
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        log_config=None,
        timeout_graceful_shutdown=10,
    )


if __name__ == "__main__":
    main()
