from crusader.env.env import (
    DEFAULT_BUILD_COMMAND,
    DEFAULT_MANIFEST,
    DEFAULT_REGISTRY_URL,
    ConfigError,
    Environment,
    LoggingEnvironment,
    _load_dotenv,
    get_env,
    get_logging_env,
    reset_env_caches,
)
from crusader.env.paths import cache_dir, logs_dir, module_logs_dir

__all__ = [
    "DEFAULT_BUILD_COMMAND",
    "DEFAULT_MANIFEST",
    "DEFAULT_REGISTRY_URL",
    "ConfigError",
    "Environment",
    "LoggingEnvironment",
    "_load_dotenv",
    "get_env",
    "get_logging_env",
    "reset_env_caches",
    "cache_dir",
    "logs_dir",
    "module_logs_dir",
]
