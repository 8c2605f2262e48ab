class ClearwayError(Exception):
    """Base exception for all clearway engine errors."""
    pass

class InvalidInputError(ClearwayError, ValueError):
    """Raised when coordinates, intersections or policy values are malformed."""
    pass

class ComputationError(ClearwayError):
    """Raised when planning, coordination or prediction fails internally."""
    pass

class ConfigurationError(ClearwayError):
    """Raised when configuration is invalid."""
    pass
