"""Virtual hierarchical filesystem: paths, content store, folders, history."""

__version__ = "0.1.0"
