"""Repository and collaborator ports for the Account Recovery bounded context."""
from typing import Protocol
from uuid import UUID

from .entities import AccountRecovery, AccountRecoveryFile
from .value_objects import DedupKey, ListFilters


class IAccountRecoveryRepository(Protocol):
    async def get_by_id(self, request_id: UUID) -> AccountRecovery | None: ...

    async def load_with_files(self, request_id: UUID) -> AccountRecovery | None: ...

    async def find_blocking(self, key: DedupKey) -> AccountRecovery | None: ...

    async def list_filtered(self, filters: ListFilters) -> tuple[list[AccountRecovery], int]: ...

    async def list_by_person(
        self, person_id: UUID, limit: int, offset: int
    ) -> tuple[list[AccountRecovery], int]: ...

    async def save(self, request: AccountRecovery) -> AccountRecovery: ...

    async def add_file(self, file: AccountRecoveryFile) -> AccountRecoveryFile: ...

    async def record_notification(self, request_id: UUID, response: str, content: str | None) -> bool: ...


class IDocumentTypeCatalog(Protocol):
    async def exists(self, document_type_id: int) -> bool: ...

    async def get_name(self, document_type_id: int) -> str | None: ...


class IBlobStore(Protocol):
    async def put(self, content: bytes, file_name: str, prefix: str) -> str: ...

    def signed_url(self, path: str) -> str: ...
