"""mdassets - gather Markdown image references into one assets directory."""

__version__ = "0.3.0"
