class UserLoginRequiredException(Exception):
    """
    User login required.
    """


class AuthenticationError(Exception):
    """
    Login or edit token acquisition was rejected or the wiki could not be reached.
    """

    def __init__(self, mediawiki_api_url: str, reason: str | None = None):
        self.mediawiki_api_url = mediawiki_api_url
        message = f"Authentication against {mediawiki_api_url} failed"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class RemoteRequestError(Exception):
    """
    Request against the MediaWiki API failed.
    """

    def __init__(self, action: str, reason: str | None = None):
        self.action = action
        message = f'API action "{action}" failed'
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class EntityNotFoundError(RemoteRequestError):
    """
    The requested entity is not known to the wiki.
    """

    def __init__(self, entity_id: str, action: str = "wbgetentities"):
        self.entity_id = entity_id
        super().__init__(action, f'Entity "{entity_id}" not found')
