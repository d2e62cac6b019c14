"""
Exception types for the extraction pipeline.

Expected failures (bad input, fetch errors, AI failures) are raised inside the
pipeline and turned into a failed ExtractionResult by the orchestrator.
"""


class RecipeAgentError(Exception):
    """Base class for all expected pipeline failures."""


class InputError(RecipeAgentError, ValueError):
    """Malformed URL or disallowed image, rejected before any I/O."""


class FetchError(RecipeAgentError):
    """Network failure, non-success HTTP status or navigation timeout."""


class ExtractionError(RecipeAgentError):
    """A generation call failed or returned data that does not match the schema."""


class MissingApiKeyError(ExtractionError):
    """No API key is configured for the generative-model provider."""
