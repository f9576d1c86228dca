from .config import get_nested_value, load_config, merge_configs
from .logging_utils import setup_logging
from .timers import Timer

__all__ = [
    "load_config",
    "merge_configs",
    "get_nested_value",
    "setup_logging",
    "Timer",
]
