from press.configs.settings import (
    DEFAULT_ERROR_MESSAGE,
    MAX_BODY_LENGTH,
    MAX_SLUG_LENGTH,
    MAX_TAGS_LENGTH,
    MAX_TITLE_LENGTH,
    LimiterConfig,
    file_logger,
    settings,
)

__all__ = [
    "DEFAULT_ERROR_MESSAGE",
    "MAX_BODY_LENGTH",
    "MAX_SLUG_LENGTH",
    "MAX_TAGS_LENGTH",
    "MAX_TITLE_LENGTH",
    "LimiterConfig",
    "file_logger",
    "settings",
]
