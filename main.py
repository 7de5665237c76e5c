import sys

from rich.console import Console
from rich.pretty import pprint

from argscan import *

registry = init_registry("demo", "scan the command line and show what was understood")
registry.add_command("build", "compile the project")
registry.add_command("clean", "remove build artifacts")
registry.add_flag("verbose", "talk more", "v")
registry.add_flag("quiet", "talk less", "q")
registry.add_option("level", "optimization level", "O", "1", ("0", "1", "2", "3"))
registry.add_option("output", "output directory", "o", "build")
registry.freeze()


if __name__ == '__main__':
    try:
        pprint(parse(registry, sys.argv[1:]))
    except ParseError as fault:
        Console(stderr=True).print(fault)
        sys.exit(1)
