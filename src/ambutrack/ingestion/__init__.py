"""Ingestion layer.

This package contains adapters that turn polled beacon payloads and
observer fixes into normalized tracker events.
"""

__all__: list[str] = []
