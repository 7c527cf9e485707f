# ghmirror/services/entity_store.py
import logging

from sqlalchemy import UniqueConstraint, func, inspect
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class EntityNotFound(LookupError):
    pass


class EntityStore:
    """Thin façade over a SQLAlchemy session.

    Rows are looked up by equality on natural-key columns and written one
    commit per insert. The store never updates or deletes.
    """

    def __init__(self, db: Session):
        self.db = db

    def find(self, model, **filters):
        return self.db.query(model).filter_by(**filters).first()

    def exists(self, model, **filters) -> bool:
        return self.find(model, **filters) is not None

    def count(self, model, **filters) -> int:
        return self.db.query(model).filter_by(**filters).count()

    def lookup_id(self, model, **filters):
        row = self.find(model, **filters)
        if row is None:
            raise EntityNotFound(f"No {model.__tablename__} matching {filters}")
        return self._identity(row)

    def find_ignore_case(self, model, **filters):
        """Like find, but string values match regardless of case."""
        clauses = []
        for name, value in filters.items():
            column = getattr(model, name)
            if isinstance(value, str):
                clauses.append(func.lower(column) == value.lower())
            else:
                clauses.append(column == value)
        return self.db.query(model).filter(*clauses).first()

    def insert(self, model, **attributes):
        """Insert one row and return its identifier."""
        identifier, _ = self.insert_or_get(model, **attributes)
        return identifier

    def insert_or_get(self, model, **attributes):
        """Insert one row and return ``(identifier, created)``.

        If a unique natural key is already taken (someone else got there
        between our check and our write), the existing row's identifier is
        returned with ``created`` False.
        """
        row = model(**attributes)
        self.db.add(row)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            existing = self._find_conflicting(model, attributes)
            if existing is None:
                raise
            logger.debug("%s already stored, keeping existing row", model.__tablename__)
            return self._identity(existing), False

        self.db.refresh(row)
        return self._identity(row), True

    def _find_conflicting(self, model, attributes: dict):
        table = model.__table__
        key_sets = [[c.name for c in table.primary_key.columns]]
        key_sets += [[c.name for c in cons.columns] for cons in table.constraints
                     if isinstance(cons, UniqueConstraint)]
        key_sets += [[c.name] for c in table.columns if c.unique]

        for names in key_sets:
            if all(attributes.get(n) is not None for n in names):
                row = self.find(model, **{n: attributes[n] for n in names})
                if row is not None:
                    return row
        return None

    @staticmethod
    def _identity(row):
        ident = inspect(row).identity
        return ident[0] if len(ident) == 1 else ident
