"""Tests for SSN encryption at rest."""

import dataclasses

import pytest
from cryptography.fernet import Fernet, InvalidToken
from sqlalchemy import text

from hr_compliance.config import get_settings
from hr_compliance.encryption import EncryptionService, derive_key
from hr_compliance.models import Employee


class TestEncryptionService:
    def test_round_trip(self):
        service = EncryptionService(Fernet.generate_key())

        token = service.encrypt("123-45-6789")

        assert token != "123-45-6789"
        assert service.decrypt(token) == "123-45-6789"
        assert service.encrypt(None) is None
        assert service.decrypt(None) is None

    def test_invalid_key(self):
        with pytest.raises(ValueError, match="Invalid encryption key"):
            EncryptionService(b"too-short")

    def test_wrong_key_cannot_decrypt(self):
        token = EncryptionService(Fernet.generate_key()).encrypt("123-45-6789")

        with pytest.raises(InvalidToken):
            EncryptionService(Fernet.generate_key()).decrypt(token)

    def test_password_derived_key_is_stable(self):
        settings = dataclasses.replace(
            get_settings(), encryption_key=None, encryption_key_password="hunter2-but-longer"
        )

        first = EncryptionService.from_settings(settings)
        second = EncryptionService.from_settings(settings)

        assert second.decrypt(first.encrypt("123-45-6789")) == "123-45-6789"
        assert derive_key("hunter2-but-longer", "a") != derive_key("hunter2-but-longer", "b")


class TestEncryptedColumn:
    """Test that SSNs never reach the database as plain text."""

    async def test_ssn_stored_encrypted(self, session):
        employee = Employee(
            first_name="Grace",
            last_name="Hopper",
            work_email="grace.hopper@clinic.org",
            job_title="Physician Assistant",
            work_location="Downtown",
            ssn="123-45-6789",
        )
        session.add(employee)
        await session.flush()

        stored = await session.scalar(
            text("SELECT ssn FROM employees WHERE id = :id"), {"id": employee.id}
        )
        assert stored != "123-45-6789"
        assert "6789" not in stored

        session.expire_all()
        reloaded = await session.get(Employee, employee.id)
        assert reloaded.ssn == "123-45-6789"

    async def test_missing_ssn_stays_null(self, session, employee):
        stored = await session.scalar(
            text("SELECT ssn FROM employees WHERE id = :id"), {"id": employee.id}
        )

        assert stored is None
