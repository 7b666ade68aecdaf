"""Access to the ``[custom]`` section of the active domain's configuration."""

from protean.utils.globals import current_domain


def custom_settings() -> dict:
    return current_domain.config.get("custom") or {}


def custom_setting(name: str, default):
    return custom_settings().get(name, default)
