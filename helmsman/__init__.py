__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'helmsman'
__author__ = 'Helmsman Contributors'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

from .argtypes import *
from .config import *
from .faults import *
from .parser import *
from .properties import *
from .subcommands import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 0, 0, "final", 0, "")

# Library logging stays silent unless the host application configures handlers.
__import__("logging").getLogger(__name__).addHandler(__import__("logging").NullHandler())

__all__ = (
    "__path__",
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info"
)

# Load the exposed API of the argument types
__all__ += argtypes.__all__  # type: ignore[attr-defined]
# Load the exposed API of the parser configuration
__all__ += config.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
# Load the exposed API of the parser
__all__ += parser.__all__  # type: ignore[attr-defined]
# Load the exposed API of the properties
__all__ += properties.__all__  # type: ignore[attr-defined]
# Load the exposed API of the subcommands
__all__ += subcommands.__all__  # type: ignore[attr-defined]
