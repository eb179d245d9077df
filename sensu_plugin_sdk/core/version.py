"""Build identification printed by the ``version`` subcommand.

Release tooling may overwrite ``commit`` and ``date`` before packaging.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _dist_version

try:
    version = _dist_version("sensu-plugin-sdk")
except PackageNotFoundError:
    version = "dev"

commit = "none"
date = "unknown"


def version_string() -> str:
    """Return the plugin version with the commit and build date."""
    return f"{version}, commit {commit}, built at {date}"
