"""Exceptions raised inside the extraction strategies.

None of these escape the public entry point; strategies catch them and turn
them into issues on an ``ExtractionResult``.
"""


class RecipeExtractionError(Exception):
    pass


class JsonLdParseError(RecipeExtractionError):
    """A JSON-LD script block could not be decoded."""

    def __init__(self, index: int, message: str):
        super().__init__(f"JSON-LD block {index} failed to parse: {message}")
        self.index = index


class FieldMappingError(RecipeExtractionError):
    """A single recipe field could not be mapped from structured data."""
