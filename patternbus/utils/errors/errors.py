from colorama import Fore, Style


class BusError(Exception):
    """Base class for all patternbus errors with custom formatting."""

    def __init__(self, message, subscriber_id=None, detail=None):
        super().__init__(message)
        self.message = message
        self.subscriber_id = subscriber_id
        self.detail = detail

    def __str__(self):
        start_bold = "\033[1m"
        end_bold = "\033[0m"
        formatted_message = (
            f"{start_bold}{Fore.RED}{self.__class__.__name__}:{end_bold} {self.message}{Style.RESET_ALL}"
        )

        if self.subscriber_id is not None:
            formatted_message += f"\nSubscriber {Fore.YELLOW}{self.subscriber_id}{Style.RESET_ALL}"

        if self.detail is not None:
            formatted_message += f"\n{Fore.CYAN}{self.detail}{Style.RESET_ALL}"

        return formatted_message


class InvalidPatternError(BusError, TypeError):
    """
    Raised when a subscription pattern is not a mapping.
    """

    def __init__(self, pattern):
        super().__init__(
            "Pass a pattern mapping: bus.sub(pattern)",
            detail=f"Got {type(pattern).__name__}: {pattern!r}",
        )
        self.pattern = pattern


class DuplicateRelayerError(BusError):
    """
    Raised when relaying into a subscriber that is already relayed by another subscriber.
    """

    def __init__(self, subscriber_id, relayer_id):
        super().__init__(
            "Subscriber already has a relayer",
            subscriber_id=subscriber_id,
            detail=f"Current relayer: {relayer_id}",
        )
        self.relayer_id = relayer_id


class TransformError(BusError):
    """
    Raised when a subscriber's map function fails on a message.
    """

    def __init__(self, subscriber_id, cause):
        super().__init__(
            f"Transform failed: {cause!r}",
            subscriber_id=subscriber_id,
        )
        self.cause = cause


class ConfigurationError(BusError, ValueError):
    pass


class ParseError(BusError):
    """
    Custom exception for handling command line parsing errors.
    """

    def __init__(self, message, detail=None):
        super().__init__(message, detail=detail)
        self.message = f"Parse error: {message}"
