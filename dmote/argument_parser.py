import getopt
import logging
import os.path as path

log = logging.getLogger(__name__)

CONFIG_DIR = path.abspath(path.join(path.dirname(__file__), '..', 'configs'))

DEFAULT_NAME = 'DM'
DEFAULT_FORMAT = 'json'


def config_location(arg):
    """Break a configuration name like 'thumbs/five.json' into its parts.

    Names are relative to the 'configs' directory.
    """
    config_path_parts = arg.split('/')
    file_parts = config_path_parts.pop().split('.')

    file_name = file_parts[0]
    format = DEFAULT_FORMAT
    if len(file_parts) == 2:
        format = file_parts[1]

    relative_path = '.'
    if config_path_parts:
        relative_path = path.join(*config_path_parts)

    absolute_path = path.abspath(path.join(CONFIG_DIR, relative_path,
                                           file_name + '.' + format))
    return {
        'name': file_name,
        'relative_path': relative_path,
        'file_name': file_name,
        'format': format,
        'absolute_path': absolute_path,
    }


def parse(argv):
    # set defaults
    debug = False
    update = False
    render = False
    renderer = 'openscad'
    whitelist = ''
    configs = []

    opts, args = getopt.getopt(argv, 'udc:w:',
                               ['config=', 'whitelist=', 'render', 'renderer=',
                                'update', 'debug'])
    for opt, arg in opts:
        if opt in ('-c', '--config'):
            configs.append(config_location(arg))
        elif opt in ('-w', '--whitelist'):
            whitelist = arg
        elif opt == '--render':
            render = True
        elif opt == '--renderer':
            renderer = arg
        elif opt in ('-u', '--update'):
            update = True
        elif opt in ('-d', '--debug'):
            debug = True

    if not configs:
        configs.append(config_location(DEFAULT_NAME))

    # The last file named governs the output location and name.
    config = dict(configs[-1])
    config['paths'] = [item['absolute_path'] for item in configs]

    log.debug('config.name:          %s', config['name'])
    log.debug('config.relative_path: %s', config['relative_path'])
    log.debug('config.paths:         %s', config['paths'])
    log.debug('update:               %s', update)
    log.debug('args:                 %s', args)

    return {
        'config': config,
        'debug': debug,
        'update': update,
        'render': render,
        'renderer': renderer,
        'whitelist': whitelist,
        'opts': opts,
        'args': args,
    }
