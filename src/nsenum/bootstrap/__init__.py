"""Project bootstrap: locating the project root."""
