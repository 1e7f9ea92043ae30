from __future__ import annotations


class HabitError(Exception):
    pass


class LimitExceeded(HabitError):
    def __init__(self, current: int, max_limit: int) -> None:
        super().__init__(f"Card limit reached: {current} of {max_limit} in use")
        self.current = current
        self.max_limit = max_limit


class TitleTooLong(HabitError):
    def __init__(self, max_length: int) -> None:
        super().__init__(f"Title is too long. Maximum is {max_length} characters")
        self.max_length = max_length


class EmptyTitle(HabitError):
    def __init__(self) -> None:
        super().__init__("Title is required")


class ReasonTooLong(HabitError):
    def __init__(self, max_length: int) -> None:
        super().__init__(f"Reason is too long. Maximum is {max_length} characters")
        self.max_length = max_length


class CardNotFound(HabitError):
    def __init__(self, card_id: str) -> None:
        super().__init__(f"Card {card_id} not found")
        self.card_id = card_id


class CardAlreadyExists(HabitError):
    def __init__(self, card_id: str) -> None:
        super().__init__(f"Card {card_id} already exists")
        self.card_id = card_id


class StorageError(HabitError):
    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message if cause is None else f"{message}: {cause}")
        self.cause = cause


class SaveError(StorageError):
    def __init__(self, cause: BaseException | None = None) -> None:
        super().__init__("Could not save data", cause)


class LoadError(StorageError):
    def __init__(self, cause: BaseException | None = None) -> None:
        super().__init__("Could not load data", cause)
