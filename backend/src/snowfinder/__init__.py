"""SnowFinder: historical snowfall rankings for ski resorts."""

__version__ = "1.0.0"
