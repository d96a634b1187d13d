"""Domain-specific exceptions — framework-independent."""


class EntityNotFoundError(Exception):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class DocumentSearchError(Exception):
    """Base class for failures that abort a single search pipeline."""


class ClassificationParseError(DocumentSearchError):
    """Raised when the intent classifier output is not well-shaped JSON."""

    def __init__(self, message: str, raw_output: str = ""):
        self.raw_output = raw_output
        super().__init__(message)


class ExtractionParseError(DocumentSearchError):
    """Raised when the document extractor output is not well-shaped JSON."""

    def __init__(self, message: str, raw_output: str = "", document_id: str | None = None):
        self.raw_output = raw_output
        self.document_id = document_id
        super().__init__(message)


class ExternalServiceError(DocumentSearchError):
    """Raised on network failure, bad response or timeout from the model service."""

    def __init__(self, service: str, message: str):
        self.service = service
        self.message = message
        super().__init__(f"[{service}] {message}")


class ChatProviderError(ExternalServiceError):
    """Raised when a chat provider returns an error.

    Provider-agnostic — works for OpenRouter, Groq, OpenAI, etc.
    """

    def __init__(self, provider: str, status_code: int, message: str):
        self.provider = provider
        self.status_code = status_code
        super().__init__(provider, f"{status_code}: {message}")
        self.message = message


class StoreQueryError(DocumentSearchError):
    """Raised when listing documents or the vector search fails."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        super().__init__(f"Document store {operation} failed: {message}")
