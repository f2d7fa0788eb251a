import logging
import sys

import dmote.argument_parser as parser
from dmote.errors import ConfigurationError

args = parser.parse(sys.argv[1:])

logging.basicConfig(level=logging.DEBUG if args['debug'] else logging.INFO,
                    format='%(levelname)s %(name)s: %(message)s')

if len(args['args']) < 1:
    print("A command must be specified")
    sys.exit(1)

command = args['args'][0]
if command not in ('help', 'generate', 'configure'):
    print("Invalid command. Try 'help'")
    sys.exit(1)

def show_usage():
    print("Dactyl-ManuForm Keyboard Generator")
    print("")
    print("Use this tool to configure and generate files for building a keyboard.")
    print("")
    print("")
    print("Usage:")
    print("  run.py [-d|--debug] [-u|--update] [-c|--config <configuration-name>]...")
    print("         [-w|--whitelist <regex>] [--render] [--renderer <program>] <command>")
    print("")
    print("Available Commands:")
    print("  help        Show this help")
    print("  generate    Output the keyboard files to the './things' directory")
    print("  configure   Generate a configuration file with default values. The config")
    print("              file will be saved to configs/<configuration-name>. If the")
    print("              --config flag is not set, the default config_name will be used.")
    print("")
    print("Flags:")
    print("  -c|--config  Set a configuration file to use, relative to the './configs'")
    print("               directory. Repeat to merge several files, in order.")
    print("  -w|--whitelist")
    print("               Build only the models whose file names match a regex.")
    print("  --render     Render scene files to STL with OpenSCAD after writing them.")
    print("  --renderer   The program to render with. Defaults to 'openscad'.")
    print("  -u|--update  Update a config file. This flag must be set if the config file")
    print("               already exists.")
    print("  -d|--debug   Show debug output")
    print("")

try:
    if command == 'help':
        show_usage()
    elif command == 'generate':
        import dmote.dactyl_manuform as command
        if command.run(args):
            sys.exit(1)
    elif command == 'configure':
        import dmote.generate_configuration as command
        if not command.save_config(args):
            sys.exit(1)
except ConfigurationError as exc:
    print("\n".join(exc.report()))
    sys.exit(1)
