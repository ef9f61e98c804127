"""Error taxonomy for PRD validation, naming and publishing.

Remote API errors live in vulcan_prd.adapters.base (GitPlatformError and
subclasses); everything raised by the local steps derives from PrdError.
"""


class PrdError(Exception):
    """Base class for local PRD publishing errors."""

    pass


class ValidationError(PrdError):
    """A single structural problem found in a PRD document."""

    pass


class EmptyDocument(ValidationError):
    """PRD content is empty or whitespace only."""

    def __init__(self, message: str = "PRD file is empty") -> None:
        super().__init__(message)


class MissingTitle(ValidationError):
    """PRD content has no '# PRD: <name>' title line."""

    def __init__(self, message: str = 'PRD file must start with "# PRD: <product name>"') -> None:
        super().__init__(message)


class ValidationFailed(PrdError):
    """Raised by the publisher when the document does not validate."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__(f"PRD validation failed: {', '.join(self.errors)}")


class NameExtractionFailed(PrdError):
    """No explicit product name and none could be read from the document."""

    def __init__(self) -> None:
        super().__init__(
            "Could not extract product name from PRD. "
            'Provide --name or ensure PRD starts with "# PRD: <name>"'
        )


class InvalidRepoFormat(PrdError):
    """Repository reference is neither 'owner/repo' nor a GitHub URL."""

    def __init__(self, ref: str) -> None:
        self.ref = ref
        super().__init__(f'Invalid repo format: {ref}. Use "owner/repo" or full GitHub URL')


class RegistryReadFailed(PrdError):
    """The registry file could not be fetched from the remote."""

    pass
