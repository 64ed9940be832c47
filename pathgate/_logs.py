import logging

logger = logging.getLogger("pathgate")

LOG_FORMAT = "%(name)s | %(levelname)s | %(asctime)s | %(message)s"


def setup_logging(level: str | int = logging.INFO) -> logging.Logger:
    "attach a console handler to the package logger, once"
    logger.setLevel(level)

    if not any(getattr(h, "_pathgate", False) for h in logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        console_handler._pathgate = True  # type: ignore[attr-defined]
        logger.addHandler(console_handler)

    return logger
