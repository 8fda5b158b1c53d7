"""Error taxonomy for Blockspring operations.

Every error carries a short, user-facing message. The command dispatcher
prints that message and stops the operation; none of these are meant to
reach the user as a traceback.
"""


class BlockspringError(Exception):
    """Base class for all handled Blockspring failures."""


# ---- local preconditions ---------------------------------------------------
class ConfigNotFound(BlockspringError):
    pass


class ConfigMalformed(BlockspringError):
    pass


class LanguageUndeclared(BlockspringError):
    pass


class ScriptFileMissing(BlockspringError):
    pass


class ScriptUnreadable(BlockspringError):
    """The script file exists but is not UTF-8 text."""


class MissingArgument(BlockspringError):
    pass


class DirectoryConflict(BlockspringError):
    pass


# ---- remote ----------------------------------------------------------------
class Unauthenticated(BlockspringError):
    pass


class NotFoundOrForbidden(BlockspringError):
    pass


class UnsupportedLanguage(BlockspringError):
    pass


class FetchFailed(BlockspringError):
    pass


class TemplateFetchFailed(BlockspringError):
    pass


class TransportError(BlockspringError):
    """Unclassified failure from the HTTP client."""


# ---- version control -------------------------------------------------------
class VcsError(BlockspringError):
    """The version-control tool could not be executed."""
