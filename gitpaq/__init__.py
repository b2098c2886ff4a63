"""gitpaq manages source packages that are fetched with git.

Packages are declared in a YAML file or through the `Paq` API, cloned into
an install root, kept up to date with `git pull` and removed once they are
no longer declared. Operations run concurrently and the state of every
package is kept in a JSON lock file.
"""

from .config import Config
from .counter import Operation, Outcome, Summary
from .host import ConsoleHost, Host
from .package import Package, PackageSpec, Status
from .paq import Paq

__all__ = [
    "Paq",
    "Config",
    "Host",
    "ConsoleHost",
    "Package",
    "PackageSpec",
    "Status",
    "Operation",
    "Outcome",
    "Summary",
]
