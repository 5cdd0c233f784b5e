"""Exceptions raised by the pack export/import engine"""


class PackError(Exception):
    """Base class for all pack engine errors"""
    pass


class PreconditionError(PackError):
    """Raised when the game is running or a required path is missing"""
    pass


class SelectionError(PackError):
    """Raised for empty addon selections and invalid character selections"""
    pass


class ArchiveShapeError(PackError):
    """Raised when an archive is not a valid UI pack"""
    pass


class ManifestDecodeError(PackError):
    """Raised when manifest.json cannot be decoded.

    Never fatal for an import: load_manifest() turns it into "no manifest".
    """
    pass


class InputError(PackError):
    """Raised when a choice needs user input but no chooser can provide it"""
    pass


class PackIOError(PackError):
    """Raised when a file operation fails while building or installing a pack"""
    pass
