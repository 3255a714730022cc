"""HLS distribution service."""
