import logging
import pathlib

from rich.pretty import pprint

from argtree import *


@computed("level", docv="LEVEL", env="SITE_LOG_LEVEL", default="warning", doc="logging threshold")
def level(value):
    if not isinstance(number := logging.getLevelName(value.upper()), int):
        raise ValueError("unknown level")
    return number


@command(
    arguments=[argument("SRC", doc="source directory", action=pathlib.Path)],
    rest=optional("DST", action=pathlib.Path, default="public"),
    options=[
        level,
        flag("drafts", short="d", doc="include draft pages"),
        repeating(option("tag", short="t", docv="TAG", env="SITE_TAG", doc="only pages with TAG")),
    ],
)
def build(opts, source, destination):
    """Build the site from SRC into DST."""
    logging.basicConfig(level=opts["level"])
    if not source.is_dir():
        error(f"{source} is not a directory")
    pprint({"source": source, "destination": destination, **opts})


@command(options=[level, computed("port", int, short="p", docv="PORT", env="PORT", default="8080", doc="port to listen on")])
async def serve(opts):
    """Serve the generated site."""
    logging.basicConfig(level=opts["level"])
    pprint({"port": opts["port"]})


site = Command("site", doc="Static site toolkit.", commands=[build, serve])


if __name__ == '__main__':
    run(site)
