"""
debug_trace.py

Debug instrumentation for following interaction state transitions.
Enable with enable_trace() or the [debug] trace_states setting.
"""

import sys
from datetime import datetime
from functools import wraps
from typing import Optional, Set

# Set to True to enable debug tracing
DEBUG_TRACE = False

# Categories that are dropped unless listed in ENABLED_CATEGORIES (very verbose)
VERBOSE_CATEGORIES = {"EVENT"}

# Verbose categories explicitly enabled
ENABLED_CATEGORIES: Set[str] = set()

# Log file (None for stderr only)
LOG_FILE: Optional[str] = None

_log_file = None


def enable_trace(enabled: bool = True, log_file: Optional[str] = None, categories=None):
    """Turn tracing on or off, optionally mirroring it to a file."""
    global DEBUG_TRACE, LOG_FILE, ENABLED_CATEGORIES
    close_log()
    DEBUG_TRACE = enabled
    LOG_FILE = log_file
    ENABLED_CATEGORIES = set(categories or ())


def _get_log_file():
    global _log_file
    if LOG_FILE and _log_file is None:
        try:
            _log_file = open(LOG_FILE, "w", encoding="utf-8")
        except OSError:
            pass
    return _log_file


def trace(msg: str, category: str = "INFO"):
    """Print a trace message with timestamp."""
    if not DEBUG_TRACE:
        return
    if category in VERBOSE_CATEGORIES and category not in ENABLED_CATEGORIES:
        return

    timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
    line = f"[{timestamp}] [{category}] {msg}"

    print(line, file=sys.stderr, flush=True)

    log_file = _get_log_file()
    if log_file:
        try:
            log_file.write(line + "\n")
            log_file.flush()
        except OSError:
            pass


def trace_call(category: str = "CALL"):
    """Decorator to trace function calls.

    The tracing flag is checked at call time so enable_trace() also affects
    functions decorated at import.
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if not DEBUG_TRACE:
                return func(*args, **kwargs)
            func_name = func.__qualname__
            trace(f">>> {func_name}", category)
            try:
                result = func(*args, **kwargs)
                trace(f"<<< {func_name}", category)
                return result
            except Exception as e:
                trace(f"!!! {func_name} raised {type(e).__name__}: {e}", "ERROR")
                raise
        return wrapper
    return decorator


def close_log():
    """Close log file."""
    global _log_file
    if _log_file:
        try:
            _log_file.close()
        except OSError:
            pass
        _log_file = None
