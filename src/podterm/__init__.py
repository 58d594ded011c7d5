"""podterm: terminal podcast player with live transcripts and transcript chat."""

__version__ = "0.3.0"
