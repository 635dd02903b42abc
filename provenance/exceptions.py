"""Error kinds raised inside the classification pipeline."""


class ExtractionError(Exception):
    """The image bytes could not be parsed into a metadata map."""


class ExternalServiceError(Exception):
    """The remote AI-likelihood service failed or answered with an unexpected shape."""
