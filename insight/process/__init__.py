"""Processing steps over opportunity lists: similarity and compression."""
