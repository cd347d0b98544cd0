"""Error taxonomy shared by the core components and the HTTP layer."""


class CoreError(Exception):
    status_code = 400
    reason = "core_error"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.reason.replace("_", " ")
        super().__init__(self.detail)


class NotFound(CoreError):
    status_code = 404
    reason = "not_found"


class AccountBlocked(CoreError):
    status_code = 403
    reason = "account_blocked"

    def __init__(self, detail: str | None = None):
        super().__init__(detail or "Account blocked by administrator.")


class UsernameTaken(CoreError):
    status_code = 409
    reason = "username_taken"

    def __init__(self, detail: str | None = None):
        super().__init__(detail or "Username is already taken")


class DuplicateActor(CoreError):
    reason = "duplicate_actor"


class EmptyContent(CoreError):
    reason = "empty_content"

    def __init__(self, detail: str | None = None):
        super().__init__(detail or "Message content required")


class ContentTooLong(CoreError):
    reason = "content_too_long"


class InvalidAction(CoreError):
    reason = "invalid_action"


class StoreUnavailable(CoreError):
    """Transient failure of the underlying store; callers may retry."""

    status_code = 503
    reason = "store_unavailable"
