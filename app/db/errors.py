class UserNotFoundError(LookupError):
    """Строка в users с таким id не найдена"""

    def __init__(self, user_id: int):
        super().__init__(f"User {user_id} not found")
        self.user_id = user_id


class UniqueViolationError(Exception):
    """Запись нарушила ограничение уникальности (например, users.email)"""
