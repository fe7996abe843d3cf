import importlib.metadata

try:
    __version__ = importlib.metadata.version("ask-cli")
except importlib.metadata.PackageNotFoundError:
    # running from a source checkout
    __version__ = "dev"
