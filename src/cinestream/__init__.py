"""CineStream: scrape movie and series streams for Stremio."""

__version__ = "0.1.0"
