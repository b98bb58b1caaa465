"""Exception types raised by yapBSP."""


class MalformedFacetError(ValueError):
    """Exception raised when a mesh facet cannot be turned into a boundary.

    ``details`` carries the offending ``facet_index`` when known, plus
    whatever else identifies the problem (``vertex_index``, ``distance``).
    """

    def __init__(self, message, details=None):
        super().__init__(message)
        self.details = details or {}


class BSPTreeError(RuntimeError):
    """Exception raised when the tree API is used against its contract."""


__all__ = ['MalformedFacetError', 'BSPTreeError']
