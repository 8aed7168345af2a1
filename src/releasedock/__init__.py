from ._version import __version__
from .client import ReleaseClient, ReleaseDockError, ReleaseDockHTTPError
from .executor import ExecutionContext, execute

__all__ = [
    "ExecutionContext",
    "ReleaseClient",
    "ReleaseDockError",
    "ReleaseDockHTTPError",
    "__version__",
    "execute",
]
