# cafe/repos/settings_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from cafe.data.models.store_settings import StoreSettingsModel

SINGLETON_ID = 1


class SettingsRepo:
    def __init__(self, db: Session):
        self.db = db

    def get(self) -> StoreSettingsModel | None:
        return self.db.execute(
            select(StoreSettingsModel).order_by(StoreSettingsModel.id).limit(1)
        ).scalar_one_or_none()

    def upsert(self, values: dict) -> StoreSettingsModel:
        """Insert jesli tabela pusta, w przeciwnym razie update jedynego wiersza (last write wins)."""
        row = self.get()
        if row is None:
            #stale id=1 - drugi rownolegly insert odbije sie od klucza glownego
            row = StoreSettingsModel(id=SINGLETON_ID, **values)
            self.db.add(row)
        else:
            for field, value in values.items():
                setattr(row, field, value)

        self.db.commit()
        self.db.refresh(row)
        return row

    def rollback(self):
        self.db.rollback()
