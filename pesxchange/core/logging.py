import logging
import sys


def configure_logging(level: str = "INFO") -> None:
    # Clear previous handlers so reloads do not duplicate output
    root = logging.getLogger()
    if root.handlers:
        root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))

    root.setLevel(level.upper())
    root.addHandler(handler)

    # SQLAlchemy echo output is controlled by DEBUG, keep its logger quiet otherwise
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
