"""Rclone Bridge: runs rclone bisync against several remotes in sequence."""

__version__ = "1.0.0"
