"""scivo - SCI resource archive reader and voice-over book builder."""

from scivo.book import Book, BookBuilder
from scivo.config import BookConfig, ConfigError, load_config
from scivo.errors import (
    BookBuildError,
    BookConsistencyError,
    FormatError,
    ResourceNotFoundError,
    UnsupportedResourceError,
)
from scivo.logger import ConsoleLogger, LogConfig, VerboseLevel
from scivo.resource import (
    ResourceStore,
    ResourceType,
    extract_as_patch,
    open_main_store,
    open_message_store,
)

__version__ = "0.1.0"

__all__ = [
    "Book",
    "BookBuildError",
    "BookBuilder",
    "BookConfig",
    "BookConsistencyError",
    "ConfigError",
    "ConsoleLogger",
    "FormatError",
    "LogConfig",
    "ResourceNotFoundError",
    "ResourceStore",
    "ResourceType",
    "UnsupportedResourceError",
    "VerboseLevel",
    "extract_as_patch",
    "load_config",
    "open_main_store",
    "open_message_store",
]
