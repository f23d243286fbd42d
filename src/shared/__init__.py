# src/shared/__init__.py
"""
Общий код между микросервисами.

Модули:
- models: DTO и Pydantic-модели документов
- events: сообщения шины и классификатор входящих сообщений
- state_machine: допустимые переходы статусов
- errors: доменные ошибки и конверт ответа
"""

__all__: list[str] = []
