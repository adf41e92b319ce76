from typing import Any, Dict, Generic, Iterator, Optional, Type, TypeVar, Union
from contextlib import contextmanager
import logging

from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from gym_management.core.exceptions import StorageConflict
from gym_management.db.base_class import Base

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class BaseRepository(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """
    Acceso CRUD genérico a un modelo.

    Las escrituras solo hacen flush: el servicio decide cuándo termina la
    transacción (ver ``commit_or_conflict``), de modo que comprobaciones y
    escritura quedan en la misma.
    """

    def __init__(self, model: Type[ModelType]):
        self.model = model

    def get(self, db: Session, id: Any) -> Optional[ModelType]:
        return db.query(self.model).filter(self.model.id == id).first()

    def get_for_update(self, db: Session, id: Any) -> Optional[ModelType]:
        """
        Igual que ``get`` pero bloqueando la fila hasta el fin de la
        transacción (SELECT ... FOR UPDATE; SQLite lo ignora).
        """
        return db.query(self.model).filter(self.model.id == id).with_for_update().first()

    def create(self, db: Session, *, obj_in: Union[CreateSchemaType, Dict[str, Any]]) -> ModelType:
        data = dict(obj_in) if isinstance(obj_in, dict) else obj_in.model_dump()
        db_obj = self.model(**data)
        db.add(db_obj)
        db.flush()
        return db_obj

    def update(
        self,
        db: Session,
        *,
        db_obj: ModelType,
        obj_in: Union[UpdateSchemaType, Dict[str, Any]],
    ) -> ModelType:
        """Aplica solo los campos recibidos; con un schema, los enviados por el cliente."""
        changes = obj_in if isinstance(obj_in, dict) else obj_in.model_dump(exclude_unset=True)
        for field, value in changes.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)
        db.add(db_obj)
        db.flush()
        return db_obj

    def remove(self, db: Session, *, db_obj: ModelType) -> None:
        db.delete(db_obj)
        db.flush()


@contextmanager
def commit_or_conflict(db: Session) -> Iterator[None]:
    """
    Ejecuta las escrituras del bloque y confirma la transacción. Una
    violación de restricción (en el flush o en el commit) se deshace y se
    traduce a ``StorageConflict``.

    Uso:
        with commit_or_conflict(db):
            booking_repository.create(db, obj_in=data)
    """
    try:
        yield
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"Conflicto de integridad al confirmar la transacción: {e.orig}")
        raise StorageConflict()
