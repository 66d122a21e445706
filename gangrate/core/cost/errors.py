"""Exceptions raised by the cost subsystem."""


class CostError(Exception):
    """Base class for cost subsystem errors."""


class ComputationInputError(CostError):
    """A referenced gang, fighter, vehicle or campaign does not exist."""

    def __init__(self, kind: str, entity_id):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} {entity_id} not found")


class CacheTransportError(CostError):
    """The cache backend failed to read or write."""
