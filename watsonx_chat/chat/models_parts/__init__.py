"""Model parts package: one concern per module, re-exported by ``chat.models``."""
