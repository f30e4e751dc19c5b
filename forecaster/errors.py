class ForecasterError(Exception):
    """Base class for the failures the tool reports to the user."""


class SchemaMismatchError(ForecasterError):
    """An imported file is missing the columns needed to read it."""


class SummaryValidationError(ForecasterError):
    """A summary operation was refused (empty selection, unconfirmed delete)."""


class StorageError(ForecasterError):
    """Reading or writing the local data store failed."""
