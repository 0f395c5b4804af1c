"""Row splitting and file reading."""
