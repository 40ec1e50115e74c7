import logging

from rich.logging import RichHandler
from rich.pretty import pprint

from argsieve import *

__prog__ = "argsieve-demo"


if __name__ == '__main__':
    logging.basicConfig(level=logging.DEBUG, format="%(message)s", handlers=[RichHandler()])
    parser = Parser(mode=Mode.SINGLE_DASH_IS_MULTIFLAG, params=["o", "output", "threads"], shell=True)
    parser.parse()
    pprint(parser)
    pprint(parser(["o", "output"], "a.out"))
    pprint(parser("threads", 1, type=int))
