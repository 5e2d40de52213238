from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("ytrss-cli")
except PackageNotFoundError:
    __version__ = "dev"
