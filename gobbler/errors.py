"""Error types for gobbler."""


class GobblerError(Exception):
    """Base class for errors surfaced to the user."""


class DuplicateNameError(GobblerError):
    """Raised when adding a subscription whose name is already stored."""

    def __init__(self, name: str, old_url: str, new_url: str):
        self.name = name
        self.old_url = old_url
        self.new_url = new_url
        super().__init__(
            f"Blog with name '{name}' already stored (old url: {old_url}, new url: {new_url})"
        )


class InvalidFeedUrlError(GobblerError):
    """Raised when a URL does not point at a usable RSS/Atom feed."""

    def __init__(self, url: str, reason: str = ""):
        self.url = url
        self.reason = reason
        message = f"'{url}' is not a valid RSS feed url"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class FeedFetchError(GobblerError):
    """Raised when a feed cannot be retrieved or parsed."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch feed {url}: {reason}")


class InvalidSubscriptionError(GobblerError):
    """Raised when a name or URL cannot be stored as a single line."""

    def __init__(self, field: str, value: str):
        self.field = field
        self.value = value
        super().__init__(f"Subscription {field} {value!r} must not contain line breaks")
