class NatsBasicError(Exception):
    pass


class ConfigError(NatsBasicError):
    pass


class BrokerConnectionError(NatsBasicError):
    def __init__(self, url: str, cause: BaseException) -> None:
        self.url = url
        self.cause = cause
        reason = str(cause) or type(cause).__name__
        super().__init__(f"failed to connect to NATS at {url}: {reason}")


class PublishError(NatsBasicError):
    pass


class FlushError(NatsBasicError):
    pass


class SubscribeError(NatsBasicError):
    pass


class DrainError(NatsBasicError):
    pass
