"""git-scout: author and file statistics across local git repositories."""

__version__ = "0.1.0"
