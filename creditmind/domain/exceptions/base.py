"""Base domain exception."""


class DomainException(Exception):
    """
    Base exception for assessment and review errors.

    Carries a stable machine-readable code next to the message so a
    calling layer can map errors without parsing text.
    """

    def __init__(self, message: str, code: str = "DOMAIN_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message}
