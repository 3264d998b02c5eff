"""Tests for location, licence and compliance document services."""

from datetime import date

import pytest

from hr_compliance.models import Employee
from hr_compliance.services.compliance_service import (
    ClinicLicenseService,
    ComplianceDocumentService,
    LicenseTypeService,
    LocationService,
    ResponsiblePersonService,
)
from hr_compliance.services.crud import Page
from hr_compliance.services.employee_service import EmployeeService, record_service
from hr_compliance.services.errors import ConflictError, NotFoundError, ServiceError

TODAY = date(2025, 6, 1)


class TestPage:
    def test_total_pages(self):
        assert Page(items=[], total=0, page=1, limit=20).total_pages == 0
        assert Page(items=[], total=20, page=1, limit=20).total_pages == 1
        assert Page(items=[], total=21, page=2, limit=20).total_pages == 2
        assert Page(items=[], total=21, page=2, limit=20).offset == 20


class TestLocationService:
    """Test the location tree."""

    async def test_tree_nests_children(self, session):
        service = LocationService(session)
        org = await service.create({"name": "Group", "type": "main_org"})
        clinic = await service.create({"name": "Clinic", "parent_id": org.id})
        await service.create({"name": "Annex", "parent_id": clinic.id})
        await service.create({"name": "Standalone"})

        tree = await service.tree()

        assert [node["name"] for node in tree] == ["Group", "Standalone"]
        assert tree[0]["children"][0]["name"] == "Clinic"
        assert tree[0]["children"][0]["children"][0]["name"] == "Annex"

    async def test_unknown_parent_rejected(self, session):
        with pytest.raises(ServiceError, match="does not exist"):
            await LocationService(session).create({"name": "Orphan", "parent_id": 999})

    async def test_cycle_rejected(self, session):
        service = LocationService(session)
        top = await service.create({"name": "Top"})
        middle = await service.create({"name": "Middle", "parent_id": top.id})
        bottom = await service.create({"name": "Bottom", "parent_id": middle.id})

        with pytest.raises(ServiceError, match="own ancestor"):
            await service.update(top.id, {"parent_id": bottom.id})
        with pytest.raises(ServiceError, match="own ancestor"):
            await service.update(top.id, {"parent_id": top.id})

    async def test_search_and_filters(self, session):
        service = LocationService(session)
        await service.create({"name": "North Clinic", "city": "Boston"})
        await service.create({"name": "South Clinic", "city": "Miami", "status": "closed"})

        by_city = await service.list_page(search="bost")
        by_status = await service.list_page(filters={"status": "closed", "type": None})

        assert [loc.name for loc in by_city.items] == ["North Clinic"]
        assert [loc.name for loc in by_status.items] == ["South Clinic"]

    async def test_missing_location(self, session):
        with pytest.raises(NotFoundError, match="Location not found"):
            await LocationService(session).get(12345)


class TestClinicLicenseService:
    """Test licence validation and expiry queries."""

    async def test_references_must_exist(self, session, clinic_setup):
        service = ClinicLicenseService(session)
        with pytest.raises(ServiceError, match="License type 999 does not exist"):
            await service.create(
                {
                    "location_id": clinic_setup["clinic"].id,
                    "license_type_id": 999,
                    "license_number": "X-1",
                    "issue_date": date(2024, 1, 1),
                    "expiration_date": date(2026, 1, 1),
                }
            )

    async def test_update_cannot_invert_dates(self, session, add_clinic_license):
        clinic_license = await add_clinic_license("FAC-1", date(2026, 1, 1))

        with pytest.raises(ServiceError, match="on or after the issue date"):
            await ClinicLicenseService(session).update(
                clinic_license.id, {"expiration_date": date(2019, 12, 31)}
            )

    async def test_expiring_window(self, session, add_clinic_license):
        await add_clinic_license("EXPIRED", date(2025, 5, 31))
        await add_clinic_license("TODAY", TODAY)
        await add_clinic_license("SOON", date(2025, 8, 1))
        await add_clinic_license("EDGE", date(2025, 8, 30))
        await add_clinic_license("LATER", date(2025, 9, 15))
        await add_clinic_license("SUSPENDED", date(2025, 7, 1), status="suspended")

        expiring = await ClinicLicenseService(session).expiring(90, TODAY)

        assert [lic.license_number for lic in expiring] == ["TODAY", "SOON", "EDGE"]

    async def test_stats(self, session, add_clinic_license):
        await add_clinic_license("A", date(2025, 5, 1), status="expired")
        await add_clinic_license("B", date(2025, 6, 20))
        await add_clinic_license(
            "C", date(2026, 6, 1), compliance_status="non_compliant"
        )

        stats = await ClinicLicenseService(session).stats(TODAY)

        assert stats["total"] == 3
        assert stats["by_status"] == {"active": 2, "expired": 1}
        assert stats["by_compliance_status"] == {"compliant": 2, "non_compliant": 1}
        assert stats["expiring_30_days"] == 1
        assert stats["expired"] == 1

    async def test_license_type_in_use_cannot_be_deleted(
        self, session, clinic_setup, add_clinic_license
    ):
        await add_clinic_license("FAC-9", date(2026, 1, 1))

        with pytest.raises(ConflictError):
            await LicenseTypeService(session).delete(clinic_setup["license_type"].id)


class TestComplianceDocumentService:
    async def test_needs_an_owner(self, session):
        with pytest.raises(ServiceError, match="clinic license or a location"):
            await ComplianceDocumentService(session).create({"document_name": "Inspection"})

    async def test_stats(self, session, clinic_setup):
        service = ComplianceDocumentService(session)
        location_id = clinic_setup["clinic"].id
        await service.create(
            {
                "location_id": location_id,
                "document_name": "Fire inspection",
                "document_type": "inspection_report",
                "expiration_date": date(2025, 6, 15),
            }
        )
        await service.create(
            {
                "location_id": location_id,
                "document_name": "Old certificate",
                "document_type": "certificate",
                "expiration_date": date(2025, 1, 1),
            }
        )

        stats = await service.stats(TODAY)

        assert stats["total"] == 2
        assert stats["by_type"] == {"certificate": 1, "inspection_report": 1}
        assert stats["expiring_30_days"] == 1
        assert stats["expired"] == 1


class TestEmployeeServices:
    async def test_search_and_department_filter(self, session):
        service = EmployeeService(session)
        await service.create(
            {"first_name": "Ann", "last_name": "Lee", "work_email": "ann@clinic.org",
             "job_title": "Registered Nurse", "work_location": "Downtown"}
        )
        await service.create(
            {"first_name": "Bob", "last_name": "Kim", "work_email": "bob@clinic.org",
             "job_title": "Physician", "work_location": "Uptown"}
        )

        assert [e.first_name for e in (await service.list_page(search="ANN")).items] == ["Ann"]
        nurses = await service.list_page(filters={"department": "nurse"})
        uptown = await service.list_page(filters={"location": "Uptown"})
        assert [e.first_name for e in nurses.items] == ["Ann"]
        assert [e.first_name for e in uptown.items] == ["Bob"]

    async def test_records_require_employee(self, session):
        with pytest.raises(NotFoundError, match="Employee not found"):
            await record_service(session, "educations").create_for_employee(77, {})

    async def test_records_cannot_change_owner(self, session):
        first = Employee(first_name="A", last_name="One", work_email="a1@clinic.org")
        second = Employee(first_name="B", last_name="Two", work_email="b2@clinic.org")
        session.add_all([first, second])
        await session.flush()
        service = record_service(session, "trainings")
        training = await service.create_for_employee(first.id, {"training_type": "CPR"})

        with pytest.raises(ServiceError, match="cannot be moved"):
            await service.update(training.id, {"employee_id": second.id})

    async def test_unknown_record_kind(self, session):
        with pytest.raises(NotFoundError):
            record_service(session, "pets")

    async def test_responsible_person_employee_must_exist(self, session):
        with pytest.raises(ServiceError, match="Employee 42 does not exist"):
            await ResponsiblePersonService(session).create(
                {"first_name": "R", "last_name": "P", "email": "rp@clinic.org", "employee_id": 42}
            )
