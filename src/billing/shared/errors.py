class CollaboratorError(Exception):
    """An external service could not be reached or answered with an error."""

    def __init__(self, service: str, message: str) -> None:
        super().__init__(f"{service}: {message}")
        self.service = service
        self.message = message
