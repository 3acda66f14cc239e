"""zonedial: dial event daemon for the ZOTAC Gaming Zone handheld."""

__version__ = "0.3.0"
