"""Infrastructure layer - configuration, logging, storage and file handling."""
