"""Console logger shared by the pipeline, the CLI and the web app.

Lines look like ``2024-05-01 12:00:00.123 [INFO] [medicaid_rag.pipeline] message``
and are written to stderr so they never mix with the chat printed on stdout.
"""

import os
import sys
from datetime import datetime

LEVEL_DEBUG = 10
LEVEL_INFO = 20
LEVEL_WARNING = 30
LEVEL_ERROR = 40
LEVEL_CRITICAL = 50

# level -> (name, ANSI color)
_LEVEL_STYLES = {
    LEVEL_DEBUG: ('DEBUG', '\033[36m'),
    LEVEL_INFO: ('INFO', '\033[32m'),
    LEVEL_WARNING: ('WARNING', '\033[33m'),
    LEVEL_ERROR: ('ERROR', '\033[31m'),
    LEVEL_CRITICAL: ('CRITICAL', '\033[35m'),
}
_RESET = '\033[0m'

LEVEL_MAP = {name: level for level, (name, _) in _LEVEL_STYLES.items()}

CURRENT_LEVEL = LEVEL_INFO


def is_production():
    return os.environ.get('APP_ENV', '').lower() == 'production'


def level_from_name(name, default=LEVEL_INFO):
    return LEVEL_MAP.get((name or '').strip().upper(), default)


def set_level(level):
    """Change the threshold; accepts a numeric level or a name such as ``"debug"``."""
    global CURRENT_LEVEL
    if isinstance(level, str):
        level = level_from_name(level)
    CURRENT_LEVEL = level
    debug(f"Log level set to {_LEVEL_STYLES.get(level, ('UNKNOWN', ''))[0]}", "medicaid_rag.logger")


def _caller_module():
    # 0: here, 1: log(), 2: debug()/info()/..., 3: the code that logged
    return sys._getframe(3).f_globals.get('__name__', 'unknown')


def _format(level, message, module, colored):
    timestamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S.%f')[:-3]
    name, color = _LEVEL_STYLES.get(level, ('UNKNOWN', _RESET))
    tag = f"{color}[{name}]{_RESET}" if colored else f"[{name}]"
    return f"{timestamp} {tag} [{module}] {message}"


def log(level, message, module=None, use_color=True):
    if level < CURRENT_LEVEL:
        return
    if module is None:
        module = _caller_module()

    stream = sys.stderr
    colored = use_color and not is_production() and stream.isatty()
    print(_format(level, message, module, colored), file=stream, flush=True)


def debug(message, module=None):
    log(LEVEL_DEBUG, message, module)


def info(message, module=None):
    log(LEVEL_INFO, message, module)


def warning(message, module=None):
    log(LEVEL_WARNING, message, module)


def error(message, module=None):
    log(LEVEL_ERROR, message, module)


def critical(message, module=None):
    log(LEVEL_CRITICAL, message, module)


def configure():
    set_level(os.environ.get('LOG_LEVEL', 'INFO'))
    environment = 'production' if is_production() else 'development'
    debug(f"Logging configured for the {environment} environment", "medicaid_rag.logger")


configure()
