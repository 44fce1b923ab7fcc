"""ActivityWatch watcher for internet connectivity and Wi-Fi presence."""

__version__ = "0.1.0"
