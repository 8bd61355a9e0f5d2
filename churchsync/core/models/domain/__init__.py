"""Domain enums for ChurchSync."""
