# timebill/repositories/base_repository.py
from typing import TypeVar, Generic, Type, Optional, Any, Dict, Union
from sqlalchemy.orm import Session
from pydantic import BaseModel

from timebill.db.base import Base

ModelType = TypeVar("ModelType", bound=Base) # type: ignore


class BaseRepository(Generic[ModelType]):
    """
    Base repository with common CRUD operations.

    Write methods commit by default. Pass ``commit=False`` to only flush, so
    that a service can group several writes into one transaction and commit
    or roll back once.
    """
    def __init__(self, model: Type[ModelType], db: Session):
        self.model = model
        self.db = db

    def get(self, id: Any) -> Optional[ModelType]:
        """Get a single record by ID."""
        return self.db.get(self.model, id)

    def create(
        self, obj_in: Union[Dict[str, Any], BaseModel], *, commit: bool = True
    ) -> ModelType:
        """Create a new record."""
        if isinstance(obj_in, BaseModel):
            obj_in_data = obj_in.model_dump()
        else:
            obj_in_data = obj_in

        db_obj = self.model(**obj_in_data)
        return self.save(db_obj, commit=commit)

    def update(
        self,
        db_obj: ModelType,
        obj_in: Union[Dict[str, Any], BaseModel],
        *,
        commit: bool = True,
    ) -> ModelType:
        """Apply only the fields present in the patch."""
        if isinstance(obj_in, BaseModel):
            update_data = obj_in.model_dump(exclude_unset=True)
        else:
            update_data = obj_in

        for field, value in update_data.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        return self.save(db_obj, commit=commit)

    def delete(self, id: Any, *, commit: bool = True) -> bool:
        """Delete a record by ID."""
        obj = self.db.get(self.model, id)
        if not obj:
            return False
        self.db.delete(obj)
        if commit:
            self.db.commit()
        else:
            self.db.flush()
        return True

    def save(self, obj: ModelType, *, commit: bool = True) -> ModelType:
        """Save an already instantiated model object."""
        self.db.add(obj)
        if commit:
            self.db.commit()
            self.db.refresh(obj)
        else:
            self.db.flush()
        return obj
