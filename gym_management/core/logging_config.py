import logging
import os
import sys
from datetime import date
from typing import List, Optional

from gym_management.core.config import Settings, get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-20s | %(filename)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Nombre con el que marcamos nuestros handlers para poder reemplazarlos
HANDLER_NAME = "gym_management"

# Loggers de terceros demasiado verbosos
QUIET_LOGGERS = {
    "uvicorn.access": logging.INFO,
    "sqlalchemy.engine": logging.WARNING,
    "passlib": logging.ERROR,
}


def _build_handlers(settings: Settings, level: int) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    # Un fichero por día dentro de LOG_DIR; vacío = solo consola
    if settings.LOG_DIR:
        os.makedirs(settings.LOG_DIR, exist_ok=True)
        filename = f"gym_management_{date.today():%Y%m%d}.log"
        handlers.append(logging.FileHandler(os.path.join(settings.LOG_DIR, filename)))

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.set_name(HANDLER_NAME)
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def setup_logging(settings: Optional[Settings] = None) -> None:
    """
    Configura el logger raíz: DEBUG con DEBUG_MODE, INFO en otro caso.

    Se puede llamar varias veces (una por app creada); solo se sustituyen
    los handlers instalados aquí, no los de uvicorn o pytest.
    """
    settings = settings or get_settings()
    level = logging.DEBUG if settings.DEBUG_MODE else logging.INFO

    root = logging.getLogger()
    root.setLevel(level)
    for handler in list(root.handlers):
        if handler.get_name() == HANDLER_NAME:
            root.removeHandler(handler)
            handler.close()
    for handler in _build_handlers(settings, level):
        root.addHandler(handler)

    for name, logger_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(logger_level)

    root.debug("Logging configurado con nivel %s", logging.getLevelName(level))
