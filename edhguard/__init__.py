"""Commander deck validation against a locally imported card catalog."""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version

try:
    __version__ = pkg_version("edhguard")
except PackageNotFoundError:
    __version__ = "0.0.0"
