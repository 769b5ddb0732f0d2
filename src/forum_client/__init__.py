"""Forum client package."""
