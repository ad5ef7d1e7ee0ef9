"""In-memory registration server for themed chat topics, with UDP notices to topic partners."""

__version__ = "0.1.0"