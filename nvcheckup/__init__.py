"""NVCheckup — GPU & driver diagnostics with reversible fixes"""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("nvcheckup")
except PackageNotFoundError:
    __version__ = "dev"

__author__ = "NVCheckup"
