"""
Red de seguridad a nivel de proceso.

Un error que escapa por completo a la capa de requests (excepción no capturada
en el hilo principal, en otro hilo o en una tarea asyncio nunca esperada) es
un defecto de programación: se registra como CRITICAL y el proceso termina con
código 1 para que el host (Render, systemd, Kubernetes) lo reinicie limpio.

Los errores de una request NO llegan aquí: los resuelven los manejadores de
excepciones de FastAPI con un 500.
"""

import asyncio
import logging
import os
import sys
import threading
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

EXIT_CODE = 1

# Hooks previos, para poder restaurarlos en el shutdown
_previous_hooks: Dict[str, Any] = {}


def terminate_process(reason: str, exc: Optional[BaseException] = None) -> None:
    """
    Registra el error y termina el proceso inmediatamente.

    Args:
        reason: Origen del error (uncaught exception, thread, asyncio task)
        exc: Excepción que escapó
    """
    exc_info = (type(exc), exc, exc.__traceback__) if exc is not None else None
    logger.critical(f"💥 {reason.upper()}: {exc!r} - terminating process", exc_info=exc_info)
    logging.shutdown()
    os._exit(EXIT_CODE)


def _excepthook(exc_type, exc, tb) -> None:
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc, tb)
        return
    terminate_process("uncaught exception", exc)


def _thread_excepthook(args: threading.ExceptHookArgs) -> None:
    if args.exc_type is SystemExit:
        return
    terminate_process(f"uncaught exception in thread {getattr(args.thread, 'name', '?')}", args.exc_value)


def _loop_exception_handler(loop: asyncio.AbstractEventLoop, context: Dict[str, Any]) -> None:
    exc = context.get("exception")
    if exc is None:
        # Avisos sin excepción (p. ej. sesión sin cerrar): comportamiento por defecto
        loop.default_exception_handler(context)
        return
    terminate_process(f"unhandled asyncio error ({context.get('message', 'task exception')})", exc)


def install_crash_handlers(loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
    """
    Instala los hooks globales (sys, threading y el loop asyncio si se indica).

    Args:
        loop: Loop de eventos en ejecución
    """
    _previous_hooks.setdefault("sys", sys.excepthook)
    _previous_hooks.setdefault("threading", threading.excepthook)
    sys.excepthook = _excepthook
    threading.excepthook = _thread_excepthook

    if loop is not None:
        _previous_hooks.setdefault("loop", loop.get_exception_handler())
        loop.set_exception_handler(_loop_exception_handler)

    logger.info("✅ Crash handlers instalados (errores fuera de requests terminan el proceso)")


def uninstall_crash_handlers(loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
    """Restaura los hooks previos a install_crash_handlers."""
    sys_hook: Optional[Callable] = _previous_hooks.pop("sys", None)
    thread_hook: Optional[Callable] = _previous_hooks.pop("threading", None)
    if sys_hook is not None:
        sys.excepthook = sys_hook
    if thread_hook is not None:
        threading.excepthook = thread_hook

    if loop is not None and "loop" in _previous_hooks:
        loop.set_exception_handler(_previous_hooks.pop("loop"))
