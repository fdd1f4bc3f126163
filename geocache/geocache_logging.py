"""This provides logging functionality for geocache.

It is modeled on the default `logging approach that comes with Python <https://docs.python.org/library/logging.html>`_.

The library never installs handlers of its own apart from a ``NullHandler`` on the
root ``GEOCACHE`` logger. Call :func:`log_to_stderr` to see what the game core is doing.
"""

import inspect
import logging
from functools import wraps
from logging import DEBUG, INFO

__all__ = [
    "DEBUG",
    "DEFAULT_LEVEL",
    "INFO",
    "LOGGER_NAME",
    "create_module_logger",
    "function_logger",
    "get_module_logger",
    "get_rootlogger",
    "log_to_stderr",
    "method_logger",
]

LOGGER_NAME = "GEOCACHE"
DEFAULT_LEVEL = DEBUG
LOG_FORMAT = "[%(levelname)s][%(asctime)s][%(filename)s:%(lineno)d] - %(message)s"


def create_module_logger(name: str | None = None) -> logging.Logger:
    """Create a module logger under the geocache root logger.

    Args:
        name: name of the module, defaults to the module of the caller
    """
    if name is None:
        frame = inspect.stack()[1]
        module = inspect.getmodule(frame[0])
        name = module.__name__
    return get_module_logger(name)


def get_module_logger(name: str) -> logging.Logger:
    """Return the logger for ``name`` nested below the geocache root logger."""
    get_rootlogger()
    if not name.startswith(LOGGER_NAME):
        name = f"{LOGGER_NAME}.{name}"
    return logging.getLogger(name)


_rootlogger = None


def get_rootlogger() -> logging.Logger:
    """Return the root logger of geocache, creating it on first use."""
    global _rootlogger  # noqa: PLW0603

    if _rootlogger is None:
        _rootlogger = logging.getLogger(LOGGER_NAME)
        _rootlogger.handlers = []
        _rootlogger.addHandler(logging.NullHandler())
        _rootlogger.setLevel(DEBUG)

    return _rootlogger


def method_logger(name: str):
    """Decorator for adding logging to a method.

    Args:
        name: The name of the module in which the method is defined.
    """
    logger = get_module_logger(name)
    classname = inspect.getouterframes(inspect.currentframe())[1][3]

    def real_decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            # the first argument is the instance, don't log it
            logger.debug(
                f"calling {classname}.{func.__name__} with {args[1::]} and {kwargs}"
            )
            return func(*args, **kwargs)

        return wrapper

    return real_decorator


def function_logger(name: str):
    """Decorator for adding logging to a function.

    Args:
        name: The name of the module in which the function is defined.
    """
    logger = get_module_logger(name)

    def real_decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            logger.debug(f"calling {func.__name__} with {args} and {kwargs}")
            return func(*args, **kwargs)

        return wrapper

    return real_decorator


def log_to_stderr(
    level: int | None = None, pass_root_logger_level: bool = False
) -> logging.Logger:
    """Configure the geocache root logger to write to stderr.

    Args:
        level: the level of the handler, defaults to ``DEFAULT_LEVEL``
        pass_root_logger_level: if True, leave the level of the root logger untouched

    Returns:
        the configured root logger
    """
    if not level:
        level = DEFAULT_LEVEL

    logger = get_rootlogger()

    formatter = logging.Formatter(LOG_FORMAT)
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    if not pass_root_logger_level:
        logger.setLevel(level)

    logger.propagate = False
    return logger
