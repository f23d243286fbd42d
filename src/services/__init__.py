# src/services/__init__.py
"""
Микросервисы приложения.

Архитектура:
- Каждый сервис — независимое FastAPI-приложение
- Общая PostgreSQL, документные коллекции в JSONB
- Коммуникация через RabbitMQ (события) и HTTP (синхронно)
- Redis для кэширования

Сервисы:
- passenger_service: регистрация и профили пассажиров
- transport_service: маршруты, рейсы, события расписания
- ticketing_service: жизненный цикл билета (покупка, оплата, валидация, истечение)
- payment_service: симулятор платёжного шлюза
"""

__all__: list[str] = []
