from typing import List, Optional

from sqlalchemy.orm import Session

from timebill.repositories.base_repository import BaseRepository
from timebill.models import Client


class ClientRepository(BaseRepository[Client]):
    """Repository for Client operations."""

    def __init__(self, db: Session):
        super().__init__(Client, db)

    def get_by_name(self, name: str) -> Optional[Client]:
        """Exact, case-sensitive name lookup"""
        return self.db.query(Client).filter(Client.name == name).first()

    def list_clients(self, active_only: bool = False) -> List[Client]:
        query = self.db.query(Client)
        if active_only:
            query = query.filter(Client.is_active.is_(True))
        return query.order_by(Client.name).all()

    def deactivate(self, client: Client) -> Client:
        client.is_active = False
        return self.save(client)
