"""
Generation module exceptions.
"""

from typing import Optional

from shared.exceptions import ExternalServiceError


class GenerationError(ExternalServiceError):
    """Raised when a generation call fails or returns an invalid shape."""

    def __init__(
        self,
        output_type: str,
        message: str,
        original_error: Optional[str] = None,
    ):
        super().__init__(
            f"Generation failed ({output_type}): {message}",
            service="llm",
            code="GENERATION_ERROR",
            details={
                "output_type": output_type,
                "original_error": original_error,
            },
        )
