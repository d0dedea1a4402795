"""
Ошибки клиента игрового сервера. Все они восстановимые: оркестратор
возвращается в стабильное состояние и показывает сообщение пользователю.
"""


class GameClientError(Exception):
    """Базовая ошибка общения с игровым сервером"""


class TransportError(GameClientError):
    """Сервер недоступен, таймаут или неожиданный HTTP-статус"""


class InvalidMoveError(GameClientError):
    """Сервер отклонил ход (обычно рассинхронизация состояния)"""


class AIMoveError(GameClientError):
    """Сервер не смог сделать ход ИИ"""


class MalformedStateError(GameClientError):
    """Ответ сервера не проходит проверку доски"""
