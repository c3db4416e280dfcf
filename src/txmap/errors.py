"""Exception hierarchy for txmap."""


class TxmapError(Exception):
    """Base exception for txmap."""


class StructuralInputError(TxmapError, ValueError):
    """
    A batch is malformed as a whole.

    Raised for mismatched id/range collection lengths, malformed ranges and
    unknown identifier schemes. Aborts the entire batch.
    """


class AnnotationSnapshotError(TxmapError):
    """An annotation snapshot could not be loaded into a store."""
