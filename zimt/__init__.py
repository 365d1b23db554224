"""pyzimt"""
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyzimt")
except PackageNotFoundError:
    # package is not installed
    pass
