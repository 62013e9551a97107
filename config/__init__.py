import os

_MODULE_BY_ENV = {
    "prod": "config.production",
    "production": "config.production",
    "test": "config.testing",
    "testing": "config.testing",
}


def get_settings_module() -> str:
    """Settings module for APP_ENV. Anything unrecognised runs as development."""
    env = os.getenv("APP_ENV", "development").strip().lower()
    return _MODULE_BY_ENV.get(env, "config.development")
