"""
errors.py - Exception types raised by the ring engine and the vault

Two families the user must be able to tell apart:
    TemporalValidationError -> "invalid time" (input mistake)
    VaultError              -> "could not save/load entries" (storage problem)
"""


class PlantaceriumError(Exception):
    """Base class for everything the engine raises on purpose"""


class TemporalValidationError(PlantaceriumError, ValueError):
    """Hour, minute, date or ring outside its valid range"""


class VaultError(PlantaceriumError):
    """Persistence failure in the note vault"""


class VaultCorruptError(VaultError):
    """The stored archive could not be parsed; nothing was loaded"""


class VaultWriteError(VaultError):
    """The archive could not be written; the in-memory change is kept"""
