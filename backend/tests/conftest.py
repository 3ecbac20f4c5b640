# backend/tests/conftest.py
from datetime import date, datetime, timezone
from uuid import uuid4

import pytest
import pytest_asyncio
from argon2 import PasswordHasher
from cryptography.fernet import Fernet

from authdir.domain.identity.entities import Person
from authdir.domain.identity.value_objects import Email, PasswordHash
from authdir.domain.recovery.entities import AccountRecovery
from authdir.infrastructure.crypto.pii import PiiCodec
from authdir.infrastructure.database import models
from authdir.infrastructure.database.connection import Base, build_engine, build_session_factory
from authdir.infrastructure.database.repositories.identity import (
    OperatorRepository,
    PersonRepository,
    SessionRepository,
)
from authdir.infrastructure.database.repositories.recovery import (
    AccountRecoveryRepository,
    DocumentTypeRepository,
)

PASSWORD = "correct horse battery staple"


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'authdir.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with engine.begin() as conn:
        await conn.execute(
            models.DocumentTypeModel.__table__.insert(),
            [
                {"id": 1, "name": "INE"},
                {"id": 2, "name": "CURP"},
                {"id": 3, "name": "Acta de nacimiento"},
                {"id": 4, "name": "Pasaporte"},
            ],
        )
        await conn.execute(
            models.OperatorModel.__table__.insert(),
            [
                {"id": 7, "email": "ops@authdir.local", "first_name": "Ana", "last_name": "Ruiz", "is_active": True},
                {"id": 8, "email": "gone@authdir.local", "first_name": "Luis", "last_name": "", "is_active": False},
            ],
        )
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def codec():
    return PiiCodec(Fernet.generate_key())


@pytest.fixture
def person_repo(db, codec):
    return PersonRepository(db, codec)


@pytest.fixture
def session_repo(db):
    return SessionRepository(db)


@pytest.fixture
def operator_repo(db):
    return OperatorRepository(db)


@pytest.fixture
def recovery_repo(db):
    return AccountRecoveryRepository(db)


@pytest.fixture
def document_types(db):
    return DocumentTypeRepository(db)


@pytest.fixture(scope="session")
def password_hash():
    # Argon2 is slow on purpose; hash once per run
    return PasswordHash(PasswordHasher().hash(PASSWORD))


@pytest_asyncio.fixture
async def person(person_repo, password_hash):
    person = Person(
        id=uuid4(),
        email=Email("maria@example.com"),
        password_hash=password_hash,
        name="María",
        first_name="López",
        last_name="García",
        curp="LOGM800101MTSPRR09",
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )
    return await person_repo.save(person)


def make_request(**overrides) -> AccountRecovery:
    fields = dict(
        id=uuid4(),
        name="Juan",
        first_name="Pérez",
        last_name="Soto",
        birth_date=date(1990, 5, 17),
        nationality_id=31,
        curp="PESJ900517HTSRTN01",
        contact_email="juan@example.com",
        created_at=datetime(2024, 3, 1, tzinfo=timezone.utc),
    )
    fields.update(overrides)
    return AccountRecovery(**fields)
