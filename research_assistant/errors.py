"""Custom exceptions for the research assistant."""

from typing import List, Optional


class ResearchAssistantError(Exception):
    """Base exception for all research assistant errors."""

    pass


class ConfigurationError(ResearchAssistantError):
    """Required configuration is missing."""

    pass


class TransportFailure(ResearchAssistantError):
    """The relay returned a non-2xx status or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class SafetyBlock(ResearchAssistantError):
    """The backend declined to answer because of its content policy."""

    def __init__(self, reason: str, categories: Optional[List[str]] = None):
        self.reason = reason
        self.categories = list(categories or [])
        blocked = ", ".join(self.categories) or "N/A"
        super().__init__(
            f"Search failed: The query was blocked for safety reasons.\n"
            f"Reason: {reason}.\nCategories: {blocked}."
        )


class EmptyOutput(ResearchAssistantError):
    """No usable text could be extracted from a model response."""

    pass


class StructuringFailure(ResearchAssistantError):
    """Stage-2 output was not valid, well-typed JSON."""

    pass


class UnexpectedFailure(ResearchAssistantError):
    """Catch-all for errors outside the known taxonomy."""

    pass


class TransformFailure(ResearchAssistantError):
    """A single-shot transform could not produce its result."""

    pass


class ComparisonFailure(TransformFailure):
    pass


class KnowledgeGraphFailure(TransformFailure):
    pass


class AnalysisFailure(TransformFailure):
    pass
