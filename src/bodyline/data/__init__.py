"""Loading tracking data from files."""

from bodyline.data.log_loader import LogLoader, load_snapshot, save_snapshot

__all__ = ["LogLoader", "load_snapshot", "save_snapshot"]
