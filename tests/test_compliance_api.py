"""
tests/test_compliance_api.py

HTTP contract tests with Starlette's TestClient.

The app is assembled from the routers directly (``app.main`` validates the
environment at import) and every service dependency is bound to the
in-memory SQLite session factory.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta, timezone

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api.dependencies import get_access_gate
from app.api.routers import compliance_router, entity_router, inspection_router, template_router
from app.services.bulk_scheduler import (
    BulkScheduler,
    InspectionScheduler,
    get_bulk_scheduler,
    get_inspection_scheduler,
)
from app.services.compliance_document_service import (
    ComplianceDocumentService,
    get_compliance_document_service,
)
from app.services.document_calendar_service import (
    DocumentCalendarService,
    get_document_calendar_service,
)
from app.validators.schedule_validator import ScheduleValidator
from db.session import get_db

# Far enough ahead that every scheduled month resolves to "scheduled".
YEAR = 2099


class _DenyAll:
    def allows(self, entity_type, entity_id) -> bool:
        return False

    def allows_organization(self, organization_id) -> bool:
        return False


@pytest.fixture()
def app(session_factory) -> FastAPI:
    application = FastAPI()
    application.include_router(compliance_router)
    application.include_router(inspection_router)
    application.include_router(template_router)
    application.include_router(entity_router)

    validator = ScheduleValidator(max_selections=240, min_year=2000, max_year=2100)

    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    application.dependency_overrides[get_db] = _get_db
    application.dependency_overrides[get_bulk_scheduler] = lambda: BulkScheduler(
        validator=validator,
        session_factory=session_factory,
    )
    application.dependency_overrides[get_inspection_scheduler] = lambda: InspectionScheduler(
        validator=validator,
        session_factory=session_factory,
    )
    application.dependency_overrides[get_compliance_document_service] = lambda: ComplianceDocumentService(
        expiring_days_ahead=90
    )
    application.dependency_overrides[get_document_calendar_service] = lambda: DocumentCalendarService(
        default_document_types=("Fire Safety Certificate", "Gas Safety Certificate")
    )
    return application


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


def _report(client: TestClient, seed, year: int = YEAR) -> dict:
    response = client.get(f"/compliance/property/{seed.property_id}/report", params={"year": year})
    assert response.status_code == 200, response.text
    return response.json()


# ---------------------------------------------------------------------------
# Entities and templates
# ---------------------------------------------------------------------------


class TestEntityEndpoints:
    def test_register_organization_block_property(self, client) -> None:
        org = client.post("/organizations", json={"name": "Riverside Homes"})
        assert org.status_code == 201
        org_id = org.json()["id"]

        block = client.post(
            "/blocks",
            json={"organization_id": org_id, "name": "East Block", "address": "5 River Road"},
        )
        assert block.status_code == 201

        prop = client.post(
            "/properties",
            json={
                "organization_id": org_id,
                "block_id": block.json()["id"],
                "name": "Flat 1",
                "address": "5 River Road, Flat 1",
            },
        )
        assert prop.status_code == 201
        assert prop.json()["block_id"] == block.json()["id"]

    def test_duplicate_organization_name(self, client) -> None:
        assert client.post("/organizations", json={"name": "Twice"}).status_code == 201
        assert client.post("/organizations", json={"name": "Twice"}).status_code == 409

    def test_property_for_unknown_organization(self, client) -> None:
        response = client.post(
            "/properties",
            json={"organization_id": str(uuid.uuid4()), "name": "Flat 9", "address": "Nowhere"},
        )
        assert response.status_code == 404
        assert response.json()["detail"]["errors"][0]["code"] == "not_found"


class TestTemplateEndpoints:
    def test_create_list_and_deactivate(self, client, seed) -> None:
        created = client.post(
            "/inspection-templates",
            json={"organization_id": str(seed.organization_id), "name": "Smoke alarm test", "scope": "property"},
        )
        assert created.status_code == 201
        template_id = created.json()["id"]
        assert created.json()["is_active"] is True

        patched = client.patch(f"/inspection-templates/{template_id}", json={"is_active": False})
        assert patched.status_code == 200
        assert patched.json()["is_active"] is False

        active = client.get(
            "/inspection-templates",
            params={"organization_id": str(seed.organization_id), "active_only": True, "scope": "property"},
        )
        names = [row["name"] for row in active.json()]
        assert names == ["Boiler service", "Fire alarm test"]

    def test_scope_cannot_change(self, client, seed) -> None:
        response = client.patch(
            f"/inspection-templates/{seed.boiler_template_id}",
            json={"scope": "block"},
        )
        assert response.status_code == 422

    def test_update_unknown_template(self, client) -> None:
        response = client.patch(f"/inspection-templates/{uuid.uuid4()}", json={"name": "Renamed"})
        assert response.status_code == 404


# ---------------------------------------------------------------------------
# Report and bulk scheduling
# ---------------------------------------------------------------------------


class TestReportAndBulkSchedule:
    def test_empty_report_is_fully_schedulable(self, client, seed) -> None:
        report = _report(client, seed)

        assert report["year"] == YEAR
        assert len(report["months"]) == 12
        assert [row["template_name"] for row in report["templates"]] == ["Boiler service", "Fire alarm test"]
        for row in report["templates"]:
            assert row["compliance_rate"] == 0
            assert all(cell["schedulable"] for cell in row["month_cells"])
            assert {cell["status"] for cell in row["month_cells"]} == {"not_scheduled"}

    def test_report_defaults_to_current_year(self, client, seed) -> None:
        response = client.get(f"/compliance/property/{seed.property_id}/report")
        assert response.status_code == 200
        assert response.json()["year"] == datetime.now(tz=timezone.utc).year

    def test_bulk_schedule_then_report(self, client, seed) -> None:
        body = {
            "entity_type": "property",
            "entity_id": str(seed.property_id),
            "year": YEAR,
            "type": "routine",
            "selections": [
                {"template_id": str(seed.boiler_template_id), "month_index": 0},
                {"template_id": str(seed.boiler_template_id), "month_index": 5, "day": 15},
            ],
        }
        response = client.post("/inspections/bulk-schedule", json=body)
        assert response.status_code == 201, response.text
        payload = response.json()
        assert payload["count"] == 2
        assert len(payload["inspection_ids"]) == 2
        assert (payload["entity_type"], payload["entity_id"], payload["year"]) == (
            "property",
            str(seed.property_id),
            YEAR,
        )

        boiler = _report(client, seed)["templates"][0]
        cells = boiler["month_cells"]
        assert cells[0]["status"] == "scheduled"
        assert cells[0]["schedulable"] is False
        assert cells[5]["count"] == 1
        assert cells[1]["schedulable"] is True
        assert boiler["total_scheduled"] == 2

        again = client.post("/inspections/bulk-schedule", json=body)
        assert again.status_code == 409
        assert len(again.json()["detail"]["errors"]) == 2
        assert _report(client, seed)["templates"][0]["total_scheduled"] == 2

    def test_invalid_selection_is_422_with_details(self, client, seed) -> None:
        response = client.post(
            "/inspections/bulk-schedule",
            json={
                "entity_type": "property",
                "entity_id": str(seed.property_id),
                "year": YEAR,
                "selections": [{"template_id": str(seed.boiler_template_id), "month_index": 12}],
            },
        )
        assert response.status_code == 422
        errors = response.json()["detail"]["errors"]
        assert errors[0]["code"] == "month_index_out_of_range"
        assert errors[0]["field"] == "selections[0].month_index"

    def test_unknown_entity_is_404(self, client, seed) -> None:
        response = client.post(
            "/inspections/bulk-schedule",
            json={
                "entity_type": "block",
                "entity_id": str(uuid.uuid4()),
                "year": YEAR,
                "selections": [{"template_id": str(seed.block_template_id), "month_index": 1}],
            },
        )
        assert response.status_code == 404

    @pytest.mark.parametrize("path", ["report", "document-calendar"])
    def test_year_outside_supported_range_is_422(self, client, seed, path) -> None:
        response = client.get(f"/compliance/property/{seed.property_id}/{path}", params={"year": 0})
        assert response.status_code == 422
        errors = response.json()["detail"]["errors"]
        assert errors[0]["code"] == "year_out_of_range"
        assert errors[0]["field"] == "year"

    def test_report_for_unknown_entity_is_404(self, client, seed) -> None:
        response = client.get(f"/compliance/block/{uuid.uuid4()}/report", params={"year": YEAR})
        assert response.status_code == 404

    def test_unknown_entity_type_is_rejected(self, client, seed) -> None:
        response = client.get(f"/compliance/garage/{seed.property_id}/report")
        assert response.status_code == 422

    def test_direct_schedule(self, client, seed) -> None:
        response = client.post(
            "/inspections",
            json={
                "entity_type": "property",
                "entity_id": str(seed.property_id),
                "template_id": str(seed.fire_template_id),
                "scheduled_date": f"{YEAR}-04-12",
                "type": "fire_hazard_assessment",
            },
        )
        assert response.status_code == 201, response.text
        assert response.json()["scheduled_date"] == f"{YEAR}-04-12"
        assert response.json()["property_id"] == str(seed.property_id)


class TestAccessGate:
    def test_denied_gate_is_403(self, app, seed) -> None:
        app.dependency_overrides[get_access_gate] = lambda: _DenyAll()
        client = TestClient(app)

        report = client.get(f"/compliance/property/{seed.property_id}/report", params={"year": YEAR})
        bulk = client.post(
            "/inspections/bulk-schedule",
            json={
                "entity_type": "property",
                "entity_id": str(seed.property_id),
                "year": YEAR,
                "selections": [{"template_id": str(seed.boiler_template_id), "month_index": 0}],
            },
        )
        assert report.status_code == 403
        assert bulk.status_code == 403

    def test_denied_gate_blocks_organization_reads(self, app, seed) -> None:
        app.dependency_overrides[get_access_gate] = lambda: _DenyAll()
        client = TestClient(app)

        expiring = client.get(
            "/compliance/documents/expiring",
            params={"organization_id": str(seed.organization_id)},
        )
        upload = client.post(
            "/compliance/documents",
            json={
                "organization_id": str(seed.organization_id),
                "document_type": "Building Insurance",
                "document_url": "https://files.example.test/insurance.pdf",
            },
        )
        assert expiring.status_code == 403
        assert upload.status_code == 403


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


class TestDocumentEndpoints:
    def _upload(self, client, seed, document_type: str, expiry: date | None) -> dict:
        response = client.post(
            "/compliance/documents",
            json={
                "organization_id": str(seed.organization_id),
                "entity_type": "property",
                "entity_id": str(seed.property_id),
                "document_type": document_type,
                "document_url": f"https://files.example.test/{uuid.uuid4()}.pdf",
                "expiry_date": expiry.isoformat() if expiry else None,
            },
        )
        assert response.status_code == 201, response.text
        return response.json()

    def test_document_calendar_with_missing_defaults(self, client, seed) -> None:
        self._upload(client, seed, "Gas Safety Certificate", date(YEAR, 12, 31))
        self._upload(client, seed, "Lift Certificate", None)

        response = client.get(
            f"/compliance/property/{seed.property_id}/document-calendar",
            params={"year": YEAR},
        )
        assert response.status_code == 200
        calendar = response.json()

        assert [row["document_type"] for row in calendar["rows"]] == [
            "Fire Safety Certificate",
            "Gas Safety Certificate",
            "Lift Certificate",
        ]
        assert calendar["rows"][0]["status"] == "missing"
        assert calendar["rows"][1]["status"] == "valid"
        assert all(month["has_document"] for month in calendar["rows"][1]["months"])
        assert calendar["rows"][2]["status"] == "no_expiry"
        assert calendar["missing_count"] == 1
        assert calendar["valid_count"] == 2
        assert calendar["overall_compliance_rate"] == 100
        assert calendar["document_count"] == 2

    def test_list_entity_documents_newest_first(self, client, seed) -> None:
        self._upload(client, seed, "EPC Certificate", None)
        response = client.get(f"/compliance/property/{seed.property_id}/documents")
        assert response.status_code == 200
        assert [row["document_type"] for row in response.json()] == ["EPC Certificate"]

    def test_expiring_documents(self, client, seed) -> None:
        today = datetime.now(tz=timezone.utc).date()
        soon = self._upload(client, seed, "Gas Safety Certificate", today + timedelta(days=10))
        lapsed = self._upload(client, seed, "EPC Certificate", today - timedelta(days=5))
        self._upload(client, seed, "HMO License", today + timedelta(days=200))

        response = client.get(
            "/compliance/documents/expiring",
            params={"organization_id": str(seed.organization_id)},
        )
        assert response.status_code == 200
        assert [row["id"] for row in response.json()] == [lapsed["id"], soon["id"]]
        assert response.json()[0]["status"] == "expired"

    def test_document_for_unknown_entity(self, client, seed) -> None:
        response = client.post(
            "/compliance/documents",
            json={
                "organization_id": str(seed.organization_id),
                "entity_type": "block",
                "entity_id": str(uuid.uuid4()),
                "document_type": "Fire Safety Certificate",
                "document_url": "https://files.example.test/fire.pdf",
            },
        )
        assert response.status_code == 404
