from dynaconf import Dynaconf, LazySettings

Settings = LazySettings

DEFAULT_SETTINGS = {
    "URL": "nats://127.0.0.1:4222",
    "NAME": "NATS-BASIC",
    "USER": None,
    "PASSWORD": None,
    "CONNECT_TIMEOUT": 2,
    "RECONNECT_TIME_WAIT": 2,
    "MAX_RECONNECT_ATTEMPTS": 60,
    "RETRY_ON_FAILED_CONNECT": False,
    "FLUSH_TIMEOUT": 10,
    "DRAIN_TIMEOUT": 30,
    "LOGGING": {
        "debug": False,
        "rich": False,
    },
}

_settings = None


def get_settings() -> Settings:
    global _settings
    if not _settings:
        _settings = Dynaconf(
            envvar_prefix="NATS",
            settings_files=["settings.yaml", ".secrets.yaml"],
            load_dotenv=True,
            merge_enabled=True,
        )
        _settings.configure(**DEFAULT_SETTINGS)
    return _settings
