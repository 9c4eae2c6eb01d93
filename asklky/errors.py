"""Exceptions raised by the generation client and corpus loader."""
from typing import Optional


class GenerationError(Exception):
    """The generation service could not produce a reply.

    Attributes:
        detail: Diagnostic description, meant for logs rather than users
        status_code: HTTP status of the failed response, if there was one
    """

    def __init__(self, detail: str, status_code: Optional[int] = None):
        self.detail = detail
        self.status_code = status_code
        super().__init__(detail)


class TransportError(GenerationError):
    """Network failure, timeout or non-success HTTP status."""


class ResponseParseError(GenerationError):
    """The service answered successfully but the body was not JSON."""


class CorpusError(Exception):
    """A knowledge base file is missing, unreadable or malformed."""
