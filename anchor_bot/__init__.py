"""anchor-bot — Matrix remote control for the anchor view."""
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("anchor-bot")
except PackageNotFoundError:
    __version__ = "0.0.0"
