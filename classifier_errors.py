class ModClassifierError(Exception):
    """Base class for errors that stop a classification run."""


class InputDirectoryError(ModClassifierError):
    """The input directory is missing, unusable or cannot be created."""


class CatalogPathError(ModClassifierError):
    """The catalog path is occupied by something other than a regular file."""


class OutputDirectoryError(ModClassifierError):
    """The output tree cannot be created."""
