class ContactNotFoundError(Exception):
    """A check-in references an identity missing from the full contact list."""

    def __init__(self, user_principal_name: str):
        super().__init__(f"Contact not found: {user_principal_name}")
        self.user_principal_name = user_principal_name


class LocationSubmitError(Exception):
    """The location submission endpoint rejected or failed a request."""

    def __init__(self, message: str, status_code: int | None = None, response_body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body
