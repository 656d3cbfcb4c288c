"""Error taxonomy for the update and networking layers.

None of these are fatal to the process: the update checker records them in
the log and degrades to "not yet confirmed".
"""


class HookManagerError(Exception):
    """Base class for errors raised by this package."""


class ResolutionError(HookManagerError):
    """DNS lookup failed. Recoverable through the fallback resolver."""


class NetworkError(HookManagerError):
    """Transport-level failure: timeout, reset, TLS or DNS."""


class ParseError(HookManagerError):
    """Release metadata was malformed or had an unexpected shape."""
