"""Grid Locator: resolve a location to its utility grid, substation zone, feeder and hut."""

__version__ = "0.1.0"
