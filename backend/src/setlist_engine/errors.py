"""Errors raised by the setlist engine."""


class SetlistEngineError(Exception):
    """Base class for setlist engine errors."""


class InvalidReference(SetlistEngineError):
    """A set index, song index, song id or band id does not resolve.

    Always user-correctable; surfaced to the caller verbatim and never retried.
    """


class SetlistNotFound(InvalidReference):
    """The addressed setlist does not exist."""


class AccessDenied(SetlistEngineError):
    """The actor may not perform the requested operation on the setlist."""


class TransientLookupFailure(SetlistEngineError):
    """A collaborator (e.g. the band directory) could not be reached."""


class VersionConflict(SetlistEngineError):
    """The setlist changed since it was loaded; nothing was written."""
