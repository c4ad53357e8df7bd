"""release-tool: bump versions and run release plans."""

__version__ = "0.4.0"
