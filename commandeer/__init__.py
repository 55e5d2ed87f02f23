__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'commandeer'
__author__ = 'Commandeer contributors'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.1.0"

from .utils import *
from .values import *
from .faults import *
from .formats import *
from .args import *
from .suggestions import *
from .commands import *
from .parser import *
from .resolver import *

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

__all__ = (
    "__path__",
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info"
)

# Load the exposed API of the utilities
__all__ += utils.__all__  # type: ignore[attr-defined]
# Load the exposed API of the value parsers
__all__ += values.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
# Load the exposed API of the formats
__all__ += formats.__all__  # type: ignore[attr-defined]
# Load the exposed API of the args
__all__ += args.__all__  # type: ignore[attr-defined]
# Load the exposed API of the suggestions
__all__ += suggestions.__all__  # type: ignore[attr-defined]
# Load the exposed API of the commands
__all__ += commands.__all__  # type: ignore[attr-defined]
# Load the exposed API of the parser
__all__ += parser.__all__  # type: ignore[attr-defined]
# Load the exposed API of the resolver
__all__ += resolver.__all__  # type: ignore[attr-defined]
