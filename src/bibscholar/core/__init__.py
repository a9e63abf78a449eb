"""Core primitives: parsing, the citation index and its collaborators."""
