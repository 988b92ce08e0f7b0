import shutil
import tempfile
import unittest
from pathlib import Path

from fastapi.testclient import TestClient

from fleetplan.api.api_run import app
from fleetplan.api.routes.plans import get_import_settings, get_plan_repository
from fleetplan.events import web_observers
from fleetplan.infra.Plan_Repository import PlanRepository
from fleetplan.logic.importing.settings import ImportSettings
from fleetplan.tests.sample_grids import full_schedule_rows, scenario_a_rows, scenario_c_rows, workbook_bytes

XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class TestPlansAPI(unittest.TestCase):

    def setUp(self):
        # Use a temporary plan store (don't touch the real one)
        self.tmp = Path(tempfile.mkdtemp())
        self.store = self.tmp / "maintenance_plans.json"
        app.dependency_overrides[get_plan_repository] = lambda: PlanRepository(self.store)
        app.dependency_overrides[get_import_settings] = lambda: ImportSettings()
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()
        shutil.rmtree(self.tmp, ignore_errors=True)

    def _upload(self, rows, vehicle_type="Truck", name=None, filename="plan.xlsx"):
        data = {"vehicle_type": vehicle_type}
        if name is not None:
            data["name"] = name
        return self.client.post(
            "/api/maintenance/plans/import",
            files={"file": (filename, workbook_bytes(rows), XLSX)},
            data=data,
        )

    def test_import_returns_summary(self):
        resp = self._upload(full_schedule_rows(), vehicle_type="Bus")
        self.assertEqual(resp.status_code, 200, resp.text)
        data = resp.json()
        self.assertEqual(data["intervalsCount"], 4)
        self.assertEqual(data["activitiesCount"], 5)
        self.assertEqual(len(data["warnings"]), 2)

        listing = self.client.get("/api/maintenance/plans").json()
        self.assertEqual(listing["count"], 1)
        summary = listing["plans"][0]
        self.assertEqual((summary["id"], summary["name"]), (data["planId"], "Plan Bus"))
        self.assertEqual(summary["categories"], ["A", "B", "C"])

    def test_reimport_keeps_plan_id(self):
        first = self._upload(scenario_a_rows(), name="Fleet A").json()
        second = self._upload(full_schedule_rows(), name="Fleet A").json()
        self.assertEqual(first["planId"], second["planId"])
        plan = self.client.get(f"/api/maintenance/plans/{first['planId']}").json()
        self.assertEqual(len(plan["activities"]), 5)

    def test_duplicate_codes_are_rejected_and_nothing_is_stored(self):
        resp = self._upload(scenario_c_rows())
        self.assertEqual(resp.status_code, 400)
        error = resp.json()
        self.assertEqual(error["code"], "DuplicateActivityCodeError")
        self.assertEqual(error["row"], 5)
        self.assertFalse(self.store.exists())

    def test_missing_header(self):
        resp = self._upload([["A", "Motor"], ["A.1", "Check oil"]])
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["code"], "ScheduleHeaderNotFound")

    def test_wrong_extension(self):
        resp = self._upload(scenario_a_rows(), filename="plan.csv")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["code"], "UnreadableWorkbookError")

    def test_vehicle_type_is_required(self):
        resp = self.client.post(
            "/api/maintenance/plans/import",
            files={"file": ("plan.xlsx", workbook_bytes(scenario_a_rows()), XLSX)},
        )
        self.assertEqual(resp.status_code, 422)

    def test_matrix_view_and_edit(self):
        plan_id = self._upload(scenario_a_rows()).json()["planId"]
        grid = self.client.get(f"/api/maintenance/plans/{plan_id}/matrix").json()
        row = grid["categories"][0]["rows"][0]
        self.assertEqual(row["cells"], [True, False, True])
        middle = grid["intervals"][1]["id"]

        edit = {"activity_id": row["activity_id"], "interval_id": middle, "applies": True}
        resp = self.client.patch(f"/api/maintenance/plans/{plan_id}/matrix", json=edit)
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json(), {
            "activityId": row["activity_id"], "intervalId": middle, "oldValue": False, "newValue": True,
        })
        again = self.client.patch(f"/api/maintenance/plans/{plan_id}/matrix", json=edit).json()
        self.assertEqual(again["oldValue"], True)

        grid = self.client.get(f"/api/maintenance/plans/{plan_id}/matrix").json()
        self.assertEqual(grid["categories"][0]["rows"][0]["cells"], [True, True, True])

    def test_matrix_filters(self):
        plan_id = self._upload(full_schedule_rows()).json()["planId"]
        grid = self.client.get(f"/api/maintenance/plans/{plan_id}/matrix", params={"category": "B"}).json()
        self.assertEqual([g["category"] for g in grid["categories"]], ["B"])
        grid = self.client.get(f"/api/maintenance/plans/{plan_id}/matrix", params={"search": "bisagras"}).json()
        self.assertEqual([r["code"] for g in grid["categories"] for r in g["rows"]], ["C.1"])

    def test_edit_with_unknown_interval(self):
        plan_id = self._upload(scenario_a_rows()).json()["planId"]
        grid = self.client.get(f"/api/maintenance/plans/{plan_id}/matrix").json()
        activity_id = grid["categories"][0]["rows"][0]["activity_id"]
        resp = self.client.patch(f"/api/maintenance/plans/{plan_id}/matrix",
                                 json={"activity_id": activity_id, "interval_id": "ghost", "applies": True})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["code"], "UnknownReferenceError")

    def test_unknown_plan(self):
        resp = self.client.get("/api/maintenance/plans/missing/matrix")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["code"], "PlanNotFoundError")

    def test_lifecycle(self):
        plan_id = self._upload(scenario_a_rows()).json()["planId"]
        self.assertEqual(self.client.delete(f"/api/maintenance/plans/{plan_id}").status_code, 409)

        copy = self.client.post(f"/api/maintenance/plans/{plan_id}/duplicate").json()
        self.assertEqual(copy["name"], "Plan Truck (Copy)")
        self.assertFalse(copy["is_active"])
        named = self.client.post(f"/api/maintenance/plans/{plan_id}/duplicate", json={"name": "Summer"}).json()
        self.assertEqual(named["name"], "Summer")

        active = self.client.get("/api/maintenance/plans", params={"active_only": True}).json()
        self.assertEqual(active["count"], 1)

        self.assertFalse(self.client.post(f"/api/maintenance/plans/{plan_id}/deactivate").json()["is_active"])
        resp = self.client.delete(f"/api/maintenance/plans/{plan_id}")
        self.assertEqual(resp.json(), {"status": "deleted", "id": plan_id})
        self.assertTrue(self.client.post(f"/api/maintenance/plans/{copy['id']}/activate").json()["is_active"])

    def test_next_maintenance(self):
        plan_id = self._upload(scenario_a_rows()).json()["planId"]
        resp = self.client.get(f"/api/maintenance/plans/{plan_id}/next-maintenance",
                               params={"odometer": 1000, "hourmeter": 50})
        self.assertEqual(resp.status_code, 200, resp.text)
        data = resp.json()
        self.assertTrue(data["next_intervals"][0]["is_due"])
        self.assertEqual([a["code"] for a in data["applicable_activities"]], ["A.1"])

        bad = self.client.get(f"/api/maintenance/plans/{plan_id}/next-maintenance",
                              params={"odometer": 100, "hourmeter": 50, "last_odometer": 200})
        self.assertEqual(bad.status_code, 422)

    def test_events_feed(self):
        web_observers.start()
        self.addCleanup(web_observers.stop)
        cursor = self.client.get("/api/events").json()["next_cursor"]
        self._upload(scenario_a_rows())
        self._upload(scenario_c_rows())
        events = self.client.get("/api/events", params={"since": cursor}).json()["events"]
        self.assertEqual([e["type"] for e in events], ["plan.imported", "plan.import_failed"])
        self.assertEqual(events[1]["error"]["code"], "DuplicateActivityCodeError")

    def _definition(self, **overrides):
        body = {
            "vehicle_type": "Truck",
            "name": "Manual",
            "intervals": [{"hours": 250, "kilometers": 10000}, {"hours": 500, "kilometers": 20000}],
            "activities": [{"code": "A.1", "description": "Cambio de aceite"},
                           {"code": "B.1", "description": "Filtro de aire"}],
            "matrix": [{"activity_code": "A.1", "interval": 1}, {"activity_code": "B.1", "interval": 2},
                       {"activity_code": "B.1", "interval": 1, "applies": False}],
            "category_labels": {"A": "Motor"},
        }
        body.update(overrides)
        return body

    def test_create_plan_from_definition(self):
        resp = self.client.post("/api/maintenance/plans", json=self._definition())
        self.assertEqual(resp.status_code, 200, resp.text)
        data = resp.json()
        self.assertEqual((data["intervalsCount"], data["activitiesCount"], data["warnings"]), (2, 2, []))

        grid = self.client.get(f"/api/maintenance/plans/{data['planId']}/matrix").json()
        cells = {r["code"]: r["cells"] for g in grid["categories"] for r in g["rows"]}
        self.assertEqual(cells, {"A.1": [True, False], "B.1": [False, True]})
        again = self.client.post("/api/maintenance/plans", json=self._definition()).json()
        self.assertEqual(again["planId"], data["planId"])

    def test_create_plan_rejects_invalid_structure(self):
        resp = self.client.post("/api/maintenance/plans", json=self._definition(
            intervals=[{"hours": 500, "kilometers": 10000}, {"hours": 250, "kilometers": 20000}]))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["code"], "NonMonotonicIntervalsError")

        resp = self.client.post("/api/maintenance/plans", json=self._definition(
            activities=[{"code": "A.1", "description": "x"}, {"code": "a.1", "description": "y"}], matrix=[]))
        self.assertEqual(resp.json()["code"], "DuplicateActivityCodeError")

        resp = self.client.post("/api/maintenance/plans", json=self._definition(activities=[], matrix=[]))
        self.assertEqual((resp.status_code, resp.json()["code"]), (400, "EmptyScheduleError"))

        resp = self.client.post("/api/maintenance/plans", json=self._definition(
            matrix=[{"activity_code": "C.1", "interval": 1}]))
        self.assertEqual(resp.json()["code"], "UnknownReferenceError")
        self.assertFalse(self.store.exists())

    def test_create_plan_validates_fields(self):
        bad_code = self._definition(activities=[{"code": "A1", "description": "x"}])
        self.assertEqual(self.client.post("/api/maintenance/plans", json=bad_code).status_code, 422)
        negative = self._definition(intervals=[{"hours": -1, "kilometers": 10}])
        self.assertEqual(self.client.post("/api/maintenance/plans", json=negative).status_code, 422)

    def test_update_plan_metadata(self):
        plan_id = self._upload(scenario_a_rows()).json()["planId"]
        resp = self.client.patch(f"/api/maintenance/plans/{plan_id}",
                                 json={"name": "Fleet A", "description": "Revised", "is_active": False})
        self.assertEqual(resp.status_code, 200, resp.text)
        summary = resp.json()
        self.assertEqual((summary["name"], summary["description"], summary["is_active"]),
                         ("Fleet A", "Revised", False))
        self.assertEqual((summary["vehicle_type"], summary["intervals_count"]), ("Truck", 3))

        structure = self.client.patch(f"/api/maintenance/plans/{plan_id}",
                                      json={"intervals": [{"hours": 1, "kilometers": 1}]})
        self.assertEqual(structure.status_code, 422)

        other = self._upload(scenario_a_rows(), name="Fleet B").json()["planId"]
        clash = self.client.patch(f"/api/maintenance/plans/{other}", json={"name": "fleet a"})
        self.assertEqual((clash.status_code, clash.json()["code"]), (409, "PlanStateError"))
        missing = self.client.patch("/api/maintenance/plans/missing", json={"name": "X"})
        self.assertEqual(missing.status_code, 404)

    def test_health(self):
        self.assertEqual(self.client.get("/health").json(), {"status": "ok"})
