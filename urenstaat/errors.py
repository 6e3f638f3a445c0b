class TimesheetError(Exception):
    pass


class FormatError(TimesheetError, ValueError):
    """Week string does not look like ``YYYY-Www``."""


class InvalidDate(TimesheetError, ValueError):
    """ISO week or calendar date that does not exist."""


class DuplicateKey(TimesheetError):
    """Uniqueness violation on insert."""


class InvalidValue(TimesheetError, ValueError):
    """Negative or non-finite hour value."""


class StorageError(TimesheetError):
    pass
