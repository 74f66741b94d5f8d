"""Host-level intrusion detection: audit rule matching, baseline strategies and JSON API helpers."""

__version__ = "0.1.0"