"""
Settings for nestedforms.

Read from the ``NESTED_FORMS`` dict in Django settings, falling back to
environment variables and then to the defaults below:

    NESTED_FORMS = {
        "IDENTITY_ATTRIBUTE": "pk",
        "LOG_DROPPED_PARAMS": True,
        "LOG_PARAM_VALUES": False,
        "LOG_VALUE_MAX_LENGTH": 200,
    }
"""
import os
from typing import Any, Callable, Dict

from django.conf import settings


def get_env_bool(key: str, default: bool = False) -> bool:
    value = os.environ.get(key, str(default)).lower()
    return value in ('true', '1', 'yes', 'on')


def get_env_int(key: str, default: int = 0) -> int:
    try:
        return int(os.environ.get(key, str(default)))
    except ValueError:
        return default


def get_env_str(key: str, default: str = '') -> str:
    return os.environ.get(key, default)


# setting name -> callable producing the default (env var first)
DEFAULTS: Dict[str, Callable[[], Any]] = {
    "IDENTITY_ATTRIBUTE": lambda: get_env_str("NESTED_FORMS_IDENTITY_ATTRIBUTE", "pk"),
    "LOG_DROPPED_PARAMS": lambda: get_env_bool("NESTED_FORMS_LOG_DROPPED_PARAMS", True),
    "LOG_PARAM_VALUES": lambda: get_env_bool("NESTED_FORMS_LOG_PARAM_VALUES", False),
    "LOG_VALUE_MAX_LENGTH": lambda: get_env_int("NESTED_FORMS_LOG_VALUE_MAX_LENGTH", 200),
}


def get_setting(name: str) -> Any:
    """
    Resolve one nestedforms setting.

    Raises:
        KeyError: If ``name`` is not a known setting
    """
    if name not in DEFAULTS:
        raise KeyError(f"Unknown nestedforms setting '{name}'.")
    user_settings = getattr(settings, "NESTED_FORMS", None) or {}
    if name in user_settings:
        return user_settings[name]
    return DEFAULTS[name]()
