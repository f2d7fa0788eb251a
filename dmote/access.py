"""Read access to validated build options.

The accessor replaces a global configuration: it is created once per build
and handed to every function that needs settings, together with the
geometry helpers for the selected engine.
"""
import enum
import logging

from .errors import ConfigurationError, MissingParameterError, UnsetParameterError

log = logging.getLogger(__name__)

_NONE = object()


class Scope(enum.Enum):
    """Levels of the by_key section, from most to least specific."""
    KEY = 'key'
    COLUMN = 'column'
    CLUSTER = 'cluster'
    GLOBAL = 'global'


def _child(node, key):
    if isinstance(node, dict):
        return node.get(key, _NONE)
    if isinstance(node, (list, tuple)) and isinstance(key, int):
        if -len(node) <= key < len(node):
            return node[key]
    return _NONE


class OptionAccessor:
    """Close over build options. Call with a key path to get a value.

    Missing keys and keys explicitly set to None raise different errors.
    False is a value.
    """

    def __init__(self, build_options, helpers=None):
        self.build_options = build_options
        self.helpers = helpers
        self._specific = {}

    def _value_at(self, path):
        node = self.build_options
        for key in path:
            node = _child(node, key)
            if node is _NONE:
                break
        return node

    def _last_good(self, path):
        good = ()
        for key in path:
            if self._value_at(good + (key,)) is not _NONE:
                good += (key,)
        return good

    def __call__(self, *path):
        value = self._value_at(path)
        if value is _NONE or value is None:
            last_good = self._last_good(path)
            error = MissingParameterError if value is _NONE else UnsetParameterError
            raise error(path, last_good, self._value_at(last_good))
        return value

    def exists(self, *path):
        return self._value_at(path) not in (_NONE, None)

    def specific_sections(self, cluster, coordinates):
        """Sections of by_key to search for a key, in order of priority.

        Each item is a Scope and a path to a section.
        """
        column, row = coordinates
        prop = self._value_at(('derived', 'by_cluster', cluster))
        columns = list(prop['column_range'])
        rows = list(prop['row_indices_by_column'].get(column, ()))
        first_column = bool(columns) and columns[0] == column
        last_column = bool(columns) and columns[-1] == column
        first_row = bool(rows) and rows[0] == row
        last_row = bool(rows) and rows[-1] == row
        candidates = [
            (Scope.KEY, [True], ('columns', column, 'rows', row)),
            (Scope.KEY, [last_row], ('columns', column, 'rows', 'last')),
            (Scope.KEY, [first_row], ('columns', column, 'rows', 'first')),
            (Scope.KEY, [last_column, last_row], ('columns', 'last', 'rows', 'last')),
            (Scope.KEY, [last_column, first_row], ('columns', 'last', 'rows', 'first')),
            (Scope.KEY, [first_column, last_row], ('columns', 'first', 'rows', 'last')),
            (Scope.KEY, [first_column, first_row], ('columns', 'first', 'rows', 'first')),
            (Scope.COLUMN, [True], ('columns', column)),
            (Scope.COLUMN, [last_column], ('columns', 'last')),
            (Scope.COLUMN, [first_column], ('columns', 'first')),
            (Scope.CLUSTER, [True], ()),
        ]
        sections = [(scope, ('by_key', 'clusters', cluster) + path)
                    for scope, requirements, path in candidates
                    if all(requirements)]
        sections.append((Scope.GLOBAL, ('by_key',)))
        return sections

    def most_specific(self, end_path, cluster, coordinates):
        """Find the most specific value set for one key in a cluster."""
        end_path = tuple(end_path)
        memo = (end_path, cluster, tuple(coordinates))
        if memo in self._specific:
            return self._specific[memo]
        for scope, section in self.specific_sections(cluster, coordinates):
            path = section + ('parameters',) + end_path
            if scope is Scope.GLOBAL:
                # Required to exist.
                value = self(*path)
            else:
                value = self._value_at(path)
                if value is _NONE or value is None:
                    continue
            log.debug('most_specific(): %s for %s %s at %s scope',
                      end_path, cluster, coordinates, scope.value)
            self._specific[memo] = value
            return value


def most_specific(getopt, end_path, cluster, coordinates):
    return getopt.most_specific(end_path, cluster, coordinates)


def all_clusters(getopt):
    return list(getopt('key_clusters'))


def resolve_anchor(getopt, name, predicate=None):
    """Resolve the name of a feature using derived settings."""
    anchors = getopt('derived', 'anchors')
    if name not in anchors:
        raise ConfigurationError('Unknown anchor', raw_value=name,
                                 accepted_keys=sorted(anchors))
    properties = anchors[name]
    if predicate is not None and not predicate(properties):
        raise ConfigurationError(
            'Named anchor cannot be used for this feature',
            raw_value=name, parsed_value=properties)
    return properties


def get_key_alias(getopt, alias):
    return resolve_anchor(getopt, alias, lambda p: p['type'] == 'key')


def key_properties(getopt, cluster, coordinates):
    """The properties of the style of a specific key, including derived data."""
    style = getopt.most_specific(('key_style',), cluster, coordinates)
    styles = getopt('derived', 'key_styles')
    if style not in styles:
        raise ConfigurationError(
            'Undefined key style', ('by_key', 'clusters', cluster),
            raw_value=style, accepted_keys=sorted(styles))
    return styles[style]
