"""Client registry stored under the "clients" key."""

from __future__ import annotations

import uuid
from typing import Any, Dict, List

from core.exceptions import ClientNotFoundError
from models.client import Client
from services.storage import JsonStore, CLIENTS
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)


class ClientService:
    """CRUD for clients."""

    def __init__(self, store: JsonStore):
        self._store = store

    def list_clients(self) -> List[Client]:
        clients = [Client.from_dict(record) for record in self._store.get_list(CLIENTS)]
        return sorted(clients, key=lambda c: c.name.lower())

    def get(self, client_id: str) -> Client:
        """
        Raises:
            ClientNotFoundError: If no client has this id
        """
        for record in self._store.get_list(CLIENTS):
            if record.get("id") == client_id:
                return Client.from_dict(record)
        raise ClientNotFoundError(client_id)

    def add(self, data: Dict[str, Any]) -> Client:
        client = Client.from_dict({**data, "id": str(uuid.uuid4())})
        with self._store.transaction() as stored:
            records = stored.get(CLIENTS) or []
            records.append(client.to_dict())
            stored[CLIENTS] = records

        logger.info(f"Added client {client.name}")
        return client

    def update(self, client_id: str, data: Dict[str, Any]) -> Client:
        client = Client.from_dict({**data, "id": client_id})
        with self._store.transaction() as stored:
            records = stored.get(CLIENTS) or []
            for index, record in enumerate(records):
                if record.get("id") == client_id:
                    records[index] = client.to_dict()
                    break
            else:
                raise ClientNotFoundError(client_id)
            stored[CLIENTS] = records

        logger.info(f"Updated client {client_id}")
        return client

    def delete(self, client_id: str) -> None:
        with self._store.transaction() as stored:
            records = stored.get(CLIENTS) or []
            remaining = [r for r in records if r.get("id") != client_id]
            if len(remaining) == len(records):
                raise ClientNotFoundError(client_id)
            stored[CLIENTS] = remaining

        logger.info(f"Deleted client {client_id}")
