from __future__ import annotations


class CommandError(RuntimeError):
    """Recoverable dispatch failure; reported to the user, state untouched."""


class MissingArgument(CommandError):
    def __init__(self, where: str) -> None:
        self.where = where
        super().__init__(f"missing argument after `{where}`")


class UnknownCommand(CommandError):
    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(f"unknown command: {token}")


class InvalidBoolToken(CommandError):
    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(f"expected `on` or `off`, got: {token}")


class InvalidIndex(CommandError):
    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(f"invalid index: {token}")


class InvalidNumber(CommandError):
    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__(f"invalid number: {token}")


class RecordNotFound(CommandError):
    def __init__(self, kind: str, index: int) -> None:
        self.kind = kind
        self.index = index
        super().__init__(f"no {kind} with index {index}")


class GoalTypeMismatch(CommandError):
    def __init__(self, index: int, expected: str) -> None:
        self.index = index
        self.expected = expected
        super().__init__(f"goal {index} is not a {expected} goal")


class ConfigError(RuntimeError):
    pass


class RecordFileError(RuntimeError):
    pass


class SyncError(RuntimeError):
    pass
