"""Logging configuration helpers."""

import logging

PIPELINE_LOGGER = "pawfectly_validation"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach one stream handler to the pipeline logger and set its level.

    Repeated calls only adjust the level, so app factories can call this
    freely in tests.
    """
    logger = logging.getLogger(PIPELINE_LOGGER)
    logger.setLevel(level.upper())
    if logger.handlers:
        return logger
    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s: %(name)s: %(message)s")
    )
    logger.addHandler(handler)
    logger.propagate = False
    return logger
