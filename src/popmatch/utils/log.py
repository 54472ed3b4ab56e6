"""Logger helpers shared by every popmatch module."""
import logging

ROOT_LOGGER_NAME = 'popmatch'

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Return a logger namespaced under ``popmatch``.

    Accepts either a dotted module path (``popmatch.systems.board``) or a short
    name (``board``); both end up below the package logger so a host
    application can configure the whole engine with one ``logging`` call.
    """
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + '.'):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
