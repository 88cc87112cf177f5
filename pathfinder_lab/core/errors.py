class PathfinderError(Exception):
    """Base class for everything this package raises on purpose."""


class ConfigurationError(PathfinderError, ValueError):
    """The grid cannot be searched (missing Start or End)."""


class InvalidPlacement(PathfinderError, ValueError):
    """Start and End were asked to share a cell."""


class GridLoadError(PathfinderError, ValueError):
    """A persisted grid record or file is malformed. Nothing was modified."""
