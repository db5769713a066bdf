"""Building blocks for a log-structured key-value store: coding, checksums, hashing, caching, histograms and a file-system environment."""

__version__ = "0.1.0"