class StoreError(Exception):
    """Persistence failure, raised by adapters in place of driver exceptions"""


class DuplicateRecordError(StoreError):
    """A unique constraint rejected the write"""
