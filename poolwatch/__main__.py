import uvicorn

from poolwatch import config
from poolwatch.main import app


def main():
    uvicorn.run(app, host=config.HOST, port=config.PORT, log_level=config.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
