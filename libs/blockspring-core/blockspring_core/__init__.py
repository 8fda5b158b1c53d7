"""Blockspring Core - block models, errors, settings and local artifact store."""

__version__ = "0.3.0"

from blockspring_core.errors import (  # noqa: E402
    BlockspringError,
    ConfigMalformed,
    ConfigNotFound,
    DirectoryConflict,
    FetchFailed,
    LanguageUndeclared,
    MissingArgument,
    NotFoundOrForbidden,
    ScriptFileMissing,
    ScriptUnreadable,
    TemplateFetchFailed,
    TransportError,
    Unauthenticated,
    UnsupportedLanguage,
    VcsError,
)
from blockspring_core.models import Block, BlockConfig  # noqa: E402
from blockspring_core.settings import (  # noqa: E402
    Settings,
    get_credentials,
    load_settings,
    user_agent,
)
from blockspring_core.store import (  # noqa: E402
    CONFIG_FILENAME,
    create_directory,
    derive_directory_name,
    language_from_ambient_files,
    read_config,
    read_script,
    script_filename_for,
    write_block,
)

__all__ = [
    "__version__",
    # errors
    "BlockspringError",
    "ConfigMalformed",
    "ConfigNotFound",
    "DirectoryConflict",
    "FetchFailed",
    "LanguageUndeclared",
    "MissingArgument",
    "NotFoundOrForbidden",
    "ScriptFileMissing",
    "ScriptUnreadable",
    "TemplateFetchFailed",
    "TransportError",
    "Unauthenticated",
    "UnsupportedLanguage",
    "VcsError",
    # models
    "Block",
    "BlockConfig",
    # settings
    "Settings",
    "get_credentials",
    "load_settings",
    "user_agent",
    # store
    "CONFIG_FILENAME",
    "create_directory",
    "derive_directory_name",
    "language_from_ambient_files",
    "read_config",
    "read_script",
    "script_filename_for",
    "write_block",
]
