__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'argtree'
__author__ = 'argtree contributors'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.1.0"

import logging

from .arguments import *
from .commands import *
from .tokens import *
from .resolver import *
from .help import *
from .faults import *
from .dispatcher import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 1, 0, "final", 0, "")

# Library logging stays silent unless the host program configures it.
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = (
    "__path__",
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info"
)

# Load the exposed API of the arguments
__all__ += arguments.__all__  # type: ignore[attr-defined]
# Load the exposed API of the commands
__all__ += commands.__all__  # type: ignore[attr-defined]
# Load the exposed API of the tokenizer
__all__ += tokens.__all__  # type: ignore[attr-defined]
# Load the exposed API of the resolver
__all__ += resolver.__all__  # type: ignore[attr-defined]
# Load the exposed API of the help renderer
__all__ += help.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
# Load the exposed API of the dispatcher
__all__ += dispatcher.__all__  # type: ignore[attr-defined]
