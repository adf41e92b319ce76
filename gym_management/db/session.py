from typing import Any, Iterator
import logging

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

logger = logging.getLogger(__name__)


def _mask_url(db_url: str) -> str:
    # Ocultar credenciales en el log
    if "@" in db_url:
        scheme = db_url.split("://")[0]
        host_info = db_url.split("@", 1)[1]
        return f"{scheme}://***@{host_info}"
    return db_url


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _disable_pysqlite_transactions(dbapi_connection, connection_record):
    # pysqlite abre la transacción en el primer INSERT; la gestionamos nosotros
    dbapi_connection.isolation_level = None


def _begin_immediate(conn):
    # Toma el lock de escritura al empezar: lecturas y escritura de la
    # transacción quedan serializadas frente a otras conexiones
    conn.exec_driver_sql("BEGIN IMMEDIATE")


def _is_file_backed_sqlite(db_url: str) -> bool:
    database = make_url(db_url).database
    return bool(database) and database != ":memory:" and "mode=memory" not in db_url


def create_db_engine(db_url: str, *, echo: bool = False, **engine_kwargs: Any) -> Engine:
    """
    Crea el engine de SQLAlchemy para la URL indicada.

    El engine se construye explícitamente (desde ``create_app`` o desde los
    tests) y se inyecta donde haga falta; no hay un engine global del proceso.

    Con SQLite en fichero cada transacción empieza con ``BEGIN IMMEDIATE``,
    que hace de lock para las comprobaciones de reservas y horarios (en
    PostgreSQL se usan FOR UPDATE y advisory locks). Las bases en memoria
    usan una sola conexión y no lo necesitan.
    """
    if db_url.startswith("sqlite"):
        connect_args = engine_kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        connect_args.setdefault("timeout", 30)
        engine = create_engine(db_url, echo=echo, connect_args=connect_args, **engine_kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        if _is_file_backed_sqlite(db_url):
            event.listen(engine, "connect", _disable_pysqlite_transactions)
            event.listen(engine, "begin", _begin_immediate)
    else:
        engine_kwargs.setdefault("pool_pre_ping", True)
        engine_kwargs.setdefault("pool_size", 10)
        engine_kwargs.setdefault("max_overflow", 20)
        engine_kwargs.setdefault("pool_timeout", 30)
        engine_kwargs.setdefault("pool_recycle", 180)
        engine = create_engine(db_url, echo=echo, **engine_kwargs)

    logger.info(f"Engine creado correctamente: {_mask_url(db_url)}")
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


# Dependencia para obtener la sesión de DB
def get_db(request: Request) -> Iterator[Session]:
    session_factory = request.app.state.session_factory
    db = session_factory()
    try:
        yield db
    except SQLAlchemyError as e:
        logger.error(f"Error de SQLAlchemy en la sesión: {e}", exc_info=True)
        db.rollback()
        raise
    except Exception:
        # Errores de dominio y HTTPException son flujo normal: solo deshacer
        db.rollback()
        raise
    finally:
        db.close()
