import uvicorn

from .app import create_app
from .config import Settings
from .log import configure


def main():
    settings = Settings.from_env()
    configure(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port,
                log_level=settings.log_level.lower())


if __name__ == '__main__':
    main()
