import json
import logging
import os

from . import params

log = logging.getLogger(__name__)


def save_config(opts):
    """Write a configuration file with default values.

    With update, settings already in the file take precedence over the
    defaults. Return False if there is a file in the way.
    """
    target = opts['config']['absolute_path']
    shape_config = params.defaults()
    shape_config['save_dir'] = opts['config']['relative_path']
    shape_config['config_name'] = opts['config']['name']

    if opts['update']:
        shape_config = params.soft_merge(shape_config, params.from_file(target))
    elif os.path.exists(target):
        log.error("A config already exists at %s. Use '--update' to continue",
                  target)
        return False

    # Refuse to write something that would not load.
    params.checked_configuration(shape_config)

    if not os.path.exists(os.path.dirname(target)):
        os.makedirs(os.path.dirname(target))

    with open(target, mode='w') as fid:
        json.dump(shape_config, fid, indent=4)
    log.info('Wrote %s', target)
    return True
