class RebroadcastError(Exception):
    pass


class FatalError(RebroadcastError):
    """El entorno o un contrato upstream está roto: hay que abortar el proceso."""


class TimestampFormatError(FatalError):
    pass


class ConfigError(FatalError):
    pass


class BroadcastError(FatalError):
    pass


class RelationshipLookupError(RebroadcastError):
    pass


class MutedListError(FatalError):
    pass


class RecoverableBroadcastError(RebroadcastError):
    def __init__(self, code: int, message: str = ""):
        super().__init__(f"[{code}] {message}")
        self.code = code
