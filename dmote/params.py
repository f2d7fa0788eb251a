"""Loading, merging and validation of configuration files.

User configuration comes as one or more JSON documents. They are merged in
order and then validated against the schema, which fills in every default
so that every key the rest of the application asks for exists. Anything
the schema does not know about is an error.
"""
import copy
import json
import logging

from pydantic import ValidationError

from . import schema
from .errors import ConfigurationError

log = logging.getLogger(__name__)

_NOWHERE = object()


def soft_merge(*documents):
    """Merge nested dicts depth-first. Later documents win on leaves."""
    result = {}
    for document in documents:
        for key, value in document.items():
            if isinstance(value, dict) and isinstance(result.get(key), dict):
                result[key] = soft_merge(result[key], value)
            else:
                result[key] = copy.deepcopy(value)
    return result


def from_file(filepath):
    try:
        with open(filepath, mode='r') as fid:
            data = json.load(fid)
    except FileNotFoundError as exc:
        raise ConfigurationError(
            'Failed to load file "{}"'.format(filepath)) from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(
            'Failed to parse file "{}": {}'.format(filepath, exc)) from exc
    if not isinstance(data, dict):
        raise ConfigurationError(
            'File "{}" does not contain a mapping'.format(filepath),
            raw_value=data)
    log.info('Loaded configuration file %s', filepath)
    return data


def load_configuration(filepaths):
    """Merge raw settings from files, in order. Defaults not included."""
    return soft_merge(*[from_file(filepath) for filepath in filepaths])


############
## Errors ##
############

def _walk_raws(raws, loc):
    """The part of a validation error location that exists in raw settings.

    Locations also name union members and dict keys, which are skipped.
    """
    path = []
    node = raws
    for key in loc:
        child = _NOWHERE
        if isinstance(node, dict) and key in node:
            child = node[key]
        elif (isinstance(node, list) and isinstance(key, int)
              and 0 <= key < len(node)):
            child = node[key]
        if child is _NOWHERE:
            continue
        path.append(key)
        node = child
    return tuple(path)


def as_configuration_error(exc, raws):
    """Describe the first problem in a ValidationError, with its key path."""
    errors = exc.errors()
    first = errors[0]
    path = _walk_raws(raws, first['loc'])
    if first['type'] == 'superfluous_key':
        return ConfigurationError(
            'Superfluous configuration key', path + (first['ctx']['key'],),
            accepted_keys=first['ctx']['accepted'])
    if first['type'] == 'missing':
        return ConfigurationError('Configuration lacks key',
                                  path + (first['loc'][-1],))
    # A union reports once for each of its members.
    messages = []
    for error in errors:
        if _walk_raws(raws, error['loc']) == path and error['msg'] not in messages:
            messages.append(error['msg'])
    return ConfigurationError('; '.join(messages), path,
                              raw_value=first.get('input'))


############
## Checks ##
############

def _check_references(options):
    """Catch names that point nowhere, with their paths."""
    clusters = options['key_clusters']
    styles = options['keys']['styles']
    for cluster in options['by_key']['clusters']:
        if cluster not in clusters:
            raise ConfigurationError(
                'Overrides for an undefined key cluster',
                ('by_key', 'clusters', cluster), accepted_keys=sorted(clusters))
    led_cluster = options['case']['leds']['position']['cluster']
    if options['case']['leds']['include'] and led_cluster not in clusters:
        raise ConfigurationError(
            'LEDs placed in an undefined key cluster',
            ('case', 'leds', 'position', 'cluster'), raw_value=led_cluster,
            accepted_keys=sorted(clusters))
    if options['by_key']['parameters']['key_style'] not in styles:
        raise ConfigurationError(
            'Undefined key style', ('by_key', 'parameters', 'key_style'),
            raw_value=options['by_key']['parameters']['key_style'],
            accepted_keys=sorted(styles))


def checked_configuration(raws):
    """Validate raw settings and fill in defaults. Return plain data."""
    try:
        options = schema.Configuration.model_validate(raws).model_dump()
    except ValidationError as exc:
        raise as_configuration_error(exc, raws) from exc
    _check_references(options)
    return options


def defaults():
    return schema.Configuration().model_dump()
