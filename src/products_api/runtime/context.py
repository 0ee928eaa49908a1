from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, replace

from pydantic import BaseModel

from src.products_api.runtime.config.config_data import ConfigData
from src.products_api.runtime.config.config_template import load_config


@dataclass
class AppContext:
    """Application context containing configuration and other app-wide state."""

    config: ConfigData


# Global configuration instance
_default_config = load_config()
_default_context = AppContext(config=_default_config)


_app_context: ContextVar[AppContext] = ContextVar(
    "app_context", default=_default_context
)


def get_context() -> AppContext:
    """Get the current application context.

    Returns:
        AppContext: The current application context containing configuration.
    """
    return _app_context.get()


def set_context(context: AppContext) -> Token[AppContext]:
    """Set the current application context.

    Args:
        context: AppContext instance to set as current.
    """
    return _app_context.set(context)


def _explicit_fields(model: BaseModel) -> dict:
    """Dump only the fields that were assigned on ``model`` or its sub-models."""
    dumped = {}
    for name in type(model).model_fields:
        value = getattr(model, name)
        if isinstance(value, BaseModel):
            nested = _explicit_fields(value)
            if nested:
                dumped[name] = nested
            elif name in model.model_fields_set:
                dumped[name] = value.model_dump()
        elif name in model.model_fields_set:
            dumped[name] = value
    return dumped


def _overlay(base: dict, override: dict) -> dict:
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        merged[key] = (
            _overlay(current, value)
            if isinstance(current, dict) and isinstance(value, dict)
            else value
        )
    return merged


def _merge_configs(base_config: ConfigData, override_config: ConfigData) -> ConfigData:
    """Overlay the explicitly set parts of ``override_config`` on ``base_config``."""
    return ConfigData.model_validate(
        _overlay(base_config.model_dump(), _explicit_fields(override_config))
    )


@contextmanager
def with_context(config_override: ConfigData | None = None):
    """Temporarily override the application configuration.

    The override is merged with the current context so a partial override
    inherits every value it does not set.

    Example:
        override = ConfigData()
        override.database.url = "sqlite://"
        with with_context(override):
            assert get_config().database.url == "sqlite://"
    """
    if config_override is None:
        yield
        return

    if not isinstance(config_override, ConfigData):
        raise ValueError(
            f"config_override must be ConfigData, or None, got {type(config_override)}"
        )

    merged_config = _merge_configs(get_context().config, config_override)
    token = set_context(replace(get_context(), config=merged_config))
    try:
        yield
    finally:
        _app_context.reset(token)


def set_config(config: ConfigData) -> None:
    """Replace the entire current configuration with the provided one."""
    set_context(replace(get_context(), config=config))


def get_config() -> ConfigData:
    """Convenience function to get the current configuration."""
    return get_context().config
