"""Contest voting backend."""
