# docmirror Errors
# Exception taxonomy for tree listing, mirroring and write-back


class MirrorError(Exception):
    """Base class for all docmirror errors."""


class ProviderQueryFailure(MirrorError):
    """
    A listing query against the source provider failed.

    Never escapes a SourceTree listing call: listings log it and
    fall back to an empty result.
    """


class NotADirectory(MirrorError):
    """A directory-only operation was invoked on a file node."""


class DocumentCreateFailure(MirrorError):
    """The provider could not create a document under a container."""


class IOFailure(MirrorError):
    """Reading, writing or copying bytes failed."""


class DirectoryCreateFailure(MirrorError):
    """A local directory could not be created."""


class ContainerNotFound(MirrorError):
    """No container with the requested name exists under the source root."""
