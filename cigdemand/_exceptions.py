class DatasetNotFoundError(FileNotFoundError):
    """
    Raised when the cigarette panel cannot be obtained: the local CSV does
    not exist, or the named dataset could not be fetched into the cache.
    """
    pass


class VariableError(ValueError):
    """Raised when a column required for a derivation or fit is missing or non-numeric."""
    pass
