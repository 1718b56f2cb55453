import functools
import logging
from typing import Type

from lgbmfit.utils.exceptions import LGBMFitException

def handle_engine_errors(operation_name: str, error_cls: Type[LGBMFitException] = LGBMFitException):
    """Decorator for consistent error handling in engines."""
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except (LGBMFitException, IndexError):
                # Project errors and bookkeeping overruns surface unchanged
                raise
            except Exception as e:
                # Wrap unexpected errors
                logger = args[0].logger if args and hasattr(args[0], 'logger') else logging.getLogger()
                logger.error(f"{operation_name} failed: {e}", exc_info=True)
                raise error_cls(f"{operation_name} failed: {str(e)}") from e
        return wrapper
    return decorator
