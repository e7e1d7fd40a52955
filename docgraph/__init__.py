"""docgraph - cross-document reference graph and consistency validator."""

__version__ = "0.3.0"
