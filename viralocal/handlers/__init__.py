"""Bot handlers package."""

from aiogram import Dispatcher

from viralocal.handlers import results, start, wizard
from viralocal.handlers.errors import global_error_handler


def register_all_handlers(dp: Dispatcher) -> None:
    """Attach every router to the dispatcher."""
    # Errors bubble up to the dispatcher, so the handler is registered there
    dp.errors.register(global_error_handler)

    dp.include_router(start.router)
    dp.include_router(wizard.router)
    dp.include_router(results.router)


__all__ = ["register_all_handlers"]
