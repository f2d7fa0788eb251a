"""Exceptions raised while reading configuration and building models."""

_NOTHING = object()


class DactylError(Exception):
    pass


class ConfigurationError(DactylError):
    """A problem with the configuration, reported with its key path."""

    def __init__(self, message, path=(), raw_value=_NOTHING,
                 parsed_value=_NOTHING, accepted_keys=None):
        super().__init__(message)
        self.message = message
        self.path = tuple(path)
        self.raw_value = raw_value
        self.parsed_value = parsed_value
        self.accepted_keys = accepted_keys

    def report(self):
        lines = ['Configuration error: {}'.format(self.message)]
        if self.path:
            lines.append('    At key(s): {}'.format(
                ' → '.join(str(key) for key in self.path)))
        if self.accepted_keys:
            lines.append('    Accepted key(s) there: {}'.format(
                ', '.join(str(key) for key in self.accepted_keys)))
        if self.raw_value is not _NOTHING:
            lines.append('    Value before parsing: {!r}'.format(self.raw_value))
        if self.parsed_value is not _NOTHING:
            lines.append('    Value after parsing: {!r}'.format(self.parsed_value))
        return lines


class MissingParameterError(ConfigurationError):
    def __init__(self, path, last_good=(), at_last_good=None):
        super().__init__('Configuration lacks key', path)
        self.last_good = tuple(last_good)
        self.at_last_good = at_last_good


class UnsetParameterError(ConfigurationError):
    def __init__(self, path, last_good=(), at_last_good=None):
        super().__init__('Configuration lacks value for key', path)
        self.last_good = tuple(last_good)
        self.at_last_good = at_last_good


class CircularDependencyError(ConfigurationError):
    def __init__(self, cycle, path=()):
        super().__init__(
            'Circular dependency: {}'.format(
                ' → '.join(cycle)),
            path)
        self.cycle = tuple(cycle)


class GeometryError(DactylError):
    """A layout that cannot be turned into a model."""


class LandscapeError(GeometryError):
    def __init__(self, coordinates, direction, landscape):
        super().__init__('Unforeseen landscape at {} facing {}: {}'.format(
            coordinates, direction, landscape))
        self.coordinates = coordinates
        self.direction = direction
        self.landscape = landscape


class TessellationError(GeometryError):
    def __init__(self, message, points):
        super().__init__('{}: {}'.format(message, points))
        self.points = points


class RenderError(DactylError):
    def __init__(self, filepath, returncode, output=''):
        if returncode is None:
            message = 'Rendering {} failed: {}'.format(filepath, output)
        else:
            message = 'Rendering {} failed with exit status {}'.format(
                filepath, returncode)
        super().__init__(message)
        self.filepath = filepath
        self.returncode = returncode
        self.output = output
