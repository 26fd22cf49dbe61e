# workforce/utils/logging.py
import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Send every logger to a single stderr handler"""
    root = logging.getLogger()
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    if not any(getattr(handler, "_workforce", False) for handler in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._workforce = True
        root.addHandler(handler)

    # uvicorn's access log duplicates what the error handler reports
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
