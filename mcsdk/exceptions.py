class McsdkError(Exception):
    """Base exception for mcsdk."""


class VersionValidationError(McsdkError):
    """Raised when a requested version is malformed or unknown upstream."""


class ResolutionError(McsdkError):
    """Raised when a download URL cannot be resolved."""


class VersionNotFoundError(ResolutionError):
    """Raised when the lookup document does not list the requested version."""


class UpstreamUnavailableError(ResolutionError):
    """Raised when a lookup document cannot be fetched or parsed."""


class DownloadError(McsdkError):
    """Raised when a request or artifact download fails."""


class WorkspaceError(McsdkError):
    """Raised when the working directory cannot be prepared."""


class LaunchError(McsdkError):
    """Raised when the server process cannot be spawned."""
