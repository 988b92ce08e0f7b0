import unittest
from decimal import Decimal

from fleetplan.domain.Activity import Activity, code_prefix
from fleetplan.domain.Grid import CellGrid, cell_to_text
from fleetplan.domain.Interval import Interval
from fleetplan.domain.Plan import Plan
from fleetplan.domain.errors import Advisory, UnknownReferenceError, UNUSED_ACTIVITY


def sample_plan():
    intervals = [Interval("i2", Decimal(500), Decimal(10000), 2), Interval("i1", Decimal(250), Decimal(5000), 1)]
    activities = [
        Activity("a1", "a.1", "Change oil", "A", 1),
        Activity("b1", "B.1", "Check pads", "B", 3),
        Activity("a2", "A.2", "Air filter", "A", 2),
    ]
    return Plan("p1", "Truck", "Plan Truck", intervals, activities, {("a1", "i1"), ("b1", "i2")},
                category_labels={"A": "Motor"})


class TestCellGrid(unittest.TestCase):

    def test_cell_to_text(self):
        self.assertEqual(cell_to_text(None), "")
        self.assertEqual(cell_to_text(500.0), "500")
        self.assertEqual(cell_to_text(2.5), "2.5")
        self.assertEqual(cell_to_text(Decimal("1.50")), "1.50")
        self.assertEqual(cell_to_text("\xa0√ "), "√")

    def test_cells_are_one_based(self):
        grid = CellGrid.from_rows([["A", "Motor"], ["A.1"]])
        self.assertEqual((grid.n_rows, grid.n_cols), (2, 2))
        self.assertEqual(grid.cell(1, 2), "Motor")
        self.assertIsNone(grid.cell(2, 2))
        self.assertIsNone(grid.cell(0, 1))
        self.assertIsNone(grid.cell(9, 1))
        self.assertFalse(grid.is_blank_row(2))
        self.assertTrue(grid.is_blank_row(3))


class TestPlan(unittest.TestCase):

    def test_ordering_and_lookups(self):
        plan = sample_plan()
        self.assertEqual([i.id for i in plan.intervals], ["i1", "i2"])
        self.assertEqual([a.code for a in plan.activities], ["A.1", "A.2", "B.1"])
        self.assertEqual(plan.categories(), ["A", "B"])
        self.assertEqual(plan.activity_by_code(" a.2 ").id, "a2")
        self.assertIsNone(plan.activity_by_code("Z.9"))
        self.assertTrue(plan.applies("a1", "i1"))
        self.assertFalse(plan.applies("a1", "i2"))
        self.assertEqual(plan.intervals[0].label, "I1")

    def test_unknown_references(self):
        plan = sample_plan()
        with self.assertRaises(UnknownReferenceError):
            plan.interval("nope")
        with self.assertRaises(UnknownReferenceError):
            plan.activity("nope")
        with self.assertRaises(UnknownReferenceError):
            Plan("p", "", "", plan.intervals, plan.activities, {("a1", "ghost")})

    def test_dict_round_trip(self):
        plan = sample_plan()
        data = plan.to_dict()
        self.assertEqual(data["matrix"][0], {"activity_id": "a1", "interval_id": "i1", "applies": True})
        self.assertEqual(data["intervals"][0]["hours"], "250")
        restored = Plan.from_dict(data)
        self.assertEqual(restored.matrix, plan.matrix)
        self.assertEqual(restored.intervals[1].kilometers, Decimal(10000))
        self.assertEqual(restored.category_labels, {"A": "Motor"})
        self.assertEqual(restored.to_dict(), data)

    def test_clone_uses_fresh_ids(self):
        plan = sample_plan()
        copy = plan.clone("p2", "Plan Truck (Copy)")
        self.assertFalse(copy.is_active)
        self.assertEqual(copy.name, "Plan Truck (Copy)")
        self.assertTrue({a.id for a in copy.activities}.isdisjoint({a.id for a in plan.activities}))
        self.assertEqual(len(copy.matrix), len(plan.matrix))
        pad = copy.activity_by_code("B.1")
        self.assertTrue(copy.applies(pad.id, copy.intervals[1].id))

    def test_negative_threshold(self):
        with self.assertRaises(ValueError):
            Interval("x", Decimal(-1), Decimal(0), 1)

    def test_code_prefix(self):
        self.assertEqual(code_prefix("a.12"), "A")
        self.assertEqual(code_prefix("12"), "")


class TestAdvisory(unittest.TestCase):

    def test_str_includes_location(self):
        advisory = Advisory(UNUSED_ACTIVITY, "Activity B.2 applies at no interval", row=11)
        self.assertEqual(str(advisory), "WarnUnusedActivity: Activity B.2 applies at no interval (row 11)")
        self.assertEqual(advisory.to_dict()["row"], 11)
        self.assertEqual(advisory, Advisory(UNUSED_ACTIVITY, "Activity B.2 applies at no interval", row=11))
