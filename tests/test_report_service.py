"""Tests for reports, the compliance dashboard and CSV export."""

from datetime import date

import pytest_asyncio

from hr_compliance.models import (
    BoardCertification,
    DeaLicense,
    Document,
    Employee,
    StateLicense,
)
from hr_compliance.services.report_service import (
    CLINIC_LICENSE_EXPORT_FIELDS,
    EMPLOYEE_EXPORT_FIELDS,
    ReportService,
    to_csv,
)

TODAY = date(2025, 6, 1)


@pytest_asyncio.fixture
async def credentials(session) -> Employee:
    """One active employee with licences on both sides of the 30 day horizon."""
    employee = Employee(first_name="Maria", last_name="Lopez", work_email="maria@clinic.org")
    inactive = Employee(
        first_name="Sam", last_name="Ortiz", work_email="sam@clinic.org", status="inactive"
    )
    session.add_all([employee, inactive])
    await session.flush()
    session.add_all(
        [
            StateLicense(
                employee_id=employee.id,
                license_number="RN-100",
                state="CA",
                expiration_date=date(2025, 6, 20),
            ),
            StateLicense(
                employee_id=employee.id,
                license_number="RN-OLD",
                state="NV",
                expiration_date=date(2025, 5, 1),
            ),
            DeaLicense(
                employee_id=employee.id,
                license_number="DEA-7",
                expiration_date=date(2025, 7, 1),
            ),
            DeaLicense(
                employee_id=inactive.id,
                license_number="DEA-TODAY",
                expiration_date=TODAY,
            ),
            BoardCertification(
                employee_id=inactive.id,
                certification="Family Medicine",
                expiration_date=date(2025, 6, 10),
            ),
            Document(employee_id=employee.id, document_type="I-9", is_verified=True),
            Document(employee_id=employee.id, document_type="W-4"),
        ]
    )
    await session.flush()
    return employee


class TestEmployeeReports:
    """Test expiring items and employee stats."""

    async def test_expiring_items(self, session, credentials):
        items = await ReportService(session).expiring_items(30, TODAY)

        assert [item["license_number"] for item in items] == [
            "Family Medicine",
            "RN-100",
            "DEA-7",
        ]
        first = items[0]
        assert first["item_type"] == "Board Certification"
        assert first["employee_name"] == "Sam Ortiz"
        assert first["days_remaining"] == 9
        assert items[2]["days_remaining"] == 30

    async def test_employee_stats(self, session, credentials):
        stats = await ReportService(session).employee_stats(TODAY)

        assert stats == {
            "total_employees": 2,
            "active_employees": 1,
            "expiring_soon": 3,
            "pending_docs": 1,
        }

    async def test_employee_export(self, session, credentials):
        rows = await ReportService(session).employee_export_rows()
        csv_text = to_csv(rows, EMPLOYEE_EXPORT_FIELDS)
        lines = csv_text.strip().splitlines()

        assert lines[0].startswith('"First Name","Last Name"')
        assert lines[1].startswith('"Maria","Lopez"')
        assert len(lines) == 3


class TestComplianceReports:
    """Test the dashboard, alerts and per-location summary."""

    async def test_dashboard(self, session, clinic_setup, add_clinic_license):
        await add_clinic_license("OLD", date(2025, 3, 1), status="expired")
        await add_clinic_license("SOON", date(2025, 6, 15))
        await add_clinic_license("QUARTER", date(2025, 8, 1), compliance_status="non_compliant")
        await add_clinic_license("FAR", date(2027, 1, 1))

        dashboard = await ReportService(session).compliance_dashboard(TODAY)

        assert dashboard["total_locations"] == 2
        assert dashboard["active_locations"] == 2
        assert dashboard["total_licenses"] == 4
        assert dashboard["active_licenses"] == 3
        assert dashboard["expiring_in_30_days"] == 1
        assert dashboard["expiring_in_60_days"] == 1
        assert dashboard["expiring_in_90_days"] == 2
        assert dashboard["expired_licenses"] == 1
        assert dashboard["non_compliant"] == 1
        assert dashboard["total_documents"] == 0

    async def test_alerts(self, session, clinic_setup, add_clinic_license):
        await add_clinic_license("OLD", date(2025, 5, 22))
        await add_clinic_license("SOON", date(2025, 6, 15), compliance_status="non_compliant")
        await add_clinic_license("FAR", date(2027, 1, 1))

        alerts = await ReportService(session).compliance_alerts(TODAY)

        assert [(a["license_number"], a["type"], a["severity"]) for a in alerts] == [
            ("OLD", "expired", "high"),
            ("SOON", "expiring", "medium"),
            ("SOON", "non_compliant", "high"),
        ]
        assert alerts[0]["message"] == "License OLD at Eastside Clinic expired 10 days ago"
        assert alerts[1]["days_remaining"] == 14

    async def test_location_summary(self, session, clinic_setup, add_clinic_license):
        await add_clinic_license("SOON", date(2025, 7, 1))

        summary = {
            entry["location_name"]: entry
            for entry in await ReportService(session).location_summary(TODAY)
        }

        assert summary["Healthy Health Group"]["total_licenses"] == 0
        assert summary["Healthy Health Group"]["compliance_status"] == "compliant"
        assert summary["Eastside Clinic"]["expiring_licenses"] == 1
        assert summary["Eastside Clinic"]["compliance_status"] == "at_risk"

        await add_clinic_license("GONE", date(2025, 1, 1))
        summary = await ReportService(session).location_summary(TODAY)
        clinic = next(e for e in summary if e["location_name"] == "Eastside Clinic")
        assert clinic["compliance_status"] == "non_compliant"

    async def test_clinic_license_export(self, session, clinic_setup, add_clinic_license):
        await add_clinic_license("FAC-1", date(2026, 2, 1), issuing_authority="State DOH")

        rows = await ReportService(session).clinic_license_export_rows()
        csv_text = to_csv(rows, CLINIC_LICENSE_EXPORT_FIELDS)

        assert rows[0]["location_name"] == "Eastside Clinic"
        assert rows[0]["license_type_name"] == "Facility License"
        assert '"FAC-1","Eastside Clinic","Facility License","2020-01-01","2026-02-01"' in csv_text
