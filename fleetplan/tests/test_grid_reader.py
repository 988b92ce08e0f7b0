import io
import unittest

import openpyxl

from fleetplan.domain.errors import EmptyScheduleError, ScheduleTooLargeError, UnreadableWorkbookError
from fleetplan.infra.grid_reader import load_grid, pick_sheet
from fleetplan.logic.importing.pipeline import import_schedule
from fleetplan.logic.importing.settings import ImportSettings
from fleetplan.tests.sample_grids import full_schedule_rows, scenario_a_rows, workbook_bytes


class TestPickSheet(unittest.TestCase):

    def _workbook(self, names):
        wb = openpyxl.Workbook()
        wb.active.title = names[0]
        for name in names[1:]:
            wb.create_sheet(name)
        return wb

    def test_preferred_name_wins(self):
        wb = self._workbook(["Resumen", "Anexo general", "Completo (Caja FULLER)"])
        self.assertEqual(pick_sheet(wb).title, "Completo (Caja FULLER)")

    def test_name_hint(self):
        wb = self._workbook(["Resumen", "Actividades 2024"])
        self.assertEqual(pick_sheet(wb).title, "Actividades 2024")

    def test_first_sheet_fallback(self):
        wb = self._workbook(["Hoja1", "Hoja2"])
        self.assertEqual(pick_sheet(wb).title, "Hoja1")


class TestLoadGrid(unittest.TestCase):

    def test_reads_preferred_sheet(self):
        content = workbook_bytes(scenario_a_rows(), extra_sheets=("Portada",))
        grid = load_grid(content)
        self.assertEqual((grid.n_rows, grid.n_cols), (4, 5))
        self.assertEqual(grid.cell(1, 3), "100h")
        self.assertEqual(grid.cell(4, 1), "A.1")
        self.assertEqual(grid.text(4, 4), "")

    def test_reads_from_file_object_and_imports(self):
        grid = load_grid(io.BytesIO(workbook_bytes(full_schedule_rows())))
        plan = import_schedule(grid, "Bus", "Plan Bus").plan
        self.assertEqual(len(plan.intervals), 4)
        self.assertEqual(len(plan.activities), 5)

    def test_trailing_blank_cells_are_trimmed(self):
        rows = scenario_a_rows() + [[None] * 8, ["", "", "", "", "", " "]]
        grid = load_grid(workbook_bytes(rows))
        self.assertEqual((grid.n_rows, grid.n_cols), (4, 5))

    def test_explicit_sheet_name(self):
        content = workbook_bytes(scenario_a_rows(), title="Datos", extra_sheets=("Portada",))
        grid = load_grid(content, sheet_name="Datos")
        self.assertEqual(grid.cell(2, 5), "3000km")
        with self.assertRaises(EmptyScheduleError):
            load_grid(content, sheet_name="Nope")

    def test_oversized_sheet_fails_fast(self):
        rows = scenario_a_rows() + [["A.%d" % n, "x", "x", "", ""] for n in range(2, 30)]
        with self.assertRaises(ScheduleTooLargeError):
            load_grid(workbook_bytes(rows), ImportSettings(max_rows=20))

    def test_not_a_workbook(self):
        with self.assertRaises(UnreadableWorkbookError) as ctx:
            load_grid(b"plain text, not a zip")
        self.assertEqual(ctx.exception.to_dict()["code"], "UnreadableWorkbookError")
