"""Tests for CLI commands."""

import pytest
from typer.testing import CliRunner

from ems_billing.app import build_billing_context
from ems_billing.cli.commands import app
from ems_billing.config import Settings
from ems_billing.storage import FileTableProvider


runner = CliRunner()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        data_dir=tmp_path / "tables",
        output_dir=tmp_path / "files",
        log_dir=tmp_path / "logs",
    )


@pytest.fixture
def seeded(settings, catalog_rows):
    """File tables with a catalog, two patients and three appointments."""
    provider = FileTableProvider(settings.data_dir, settings.output_dir)
    provider.set_table("BillingCodes", catalog_rows)
    provider.set_table(
        "Patients",
        [["1", "1234567890", "Smith", "John", "M"], ["2", "9876543210AB", "Doe", "Jane", "F"]],
    )
    provider.set_table(
        "Appointments",
        [["10", "2023-05-10", "1", "0"], ["11", "2023-05-22", "2", "0"], ["12", "2023-06-01", "1", "0"]],
    )
    return provider


@pytest.fixture(autouse=True)
def use_temp_context(monkeypatch, settings):
    monkeypatch.setattr(
        "ems_billing.cli.commands.get_context",
        lambda: build_billing_context(settings),
    )


class TestVersionCommand:
    def test_version_command(self):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "EMS Billing" in result.stdout
        assert "0.1.0" in result.stdout


class TestCatalogCommands:
    def test_codes_lists_catalog(self, seeded):
        result = runner.invoke(app, ["codes"])
        assert result.exit_code == 0
        assert "A001" in result.stdout
        assert "33.70" in result.stdout

    def test_import_codes(self, tmp_path, settings):
        master = tmp_path / "master.txt"
        master.write_text("A0012023010100000337000\nA6652023040100000913500\n")

        result = runner.invoke(app, ["import-codes", str(master)])
        assert result.exit_code == 0
        assert "Imported 2 billing codes" in result.stdout

        tables = FileTableProvider(settings.data_dir, settings.output_dir)
        assert tables.get_table("BillingCodes")["A665"] == ["A665", "2023-04-01", "91.35"]

    def test_import_codes_write_failure(self, tmp_path, monkeypatch):
        master = tmp_path / "master.txt"
        master.write_text("A0012023010100000337000\n")

        def fail(self, name, rows):
            raise OSError("read-only file system")

        monkeypatch.setattr(FileTableProvider, "set_table", fail)

        result = runner.invoke(app, ["import-codes", str(master)])
        assert result.exit_code == 1
        assert "Failed to save billing codes" in result.stdout
        assert result.exception is None or isinstance(result.exception, SystemExit)

    def test_import_codes_missing_file(self, tmp_path):
        result = runner.invoke(app, ["import-codes", str(tmp_path / "nope.txt")])
        assert result.exit_code == 1

    def test_import_codes_invalid_file(self, tmp_path):
        master = tmp_path / "master.txt"
        master.write_text("not a fee line\n")
        result = runner.invoke(app, ["import-codes", str(master)])
        assert result.exit_code == 1
        assert "Invalid master file" in result.stdout


class TestRecordCommands:
    def test_add_and_list(self, seeded):
        result = runner.invoke(app, ["add-record", "10", "1", "a001"])
        assert result.exit_code == 0
        assert "Added billing record 1" in result.stdout

        result = runner.invoke(app, ["records"])
        assert result.exit_code == 0
        assert "A001" in result.stdout

    def test_add_unknown_code_fails(self, seeded):
        result = runner.invoke(app, ["add-record", "10", "1", "Z999"])
        assert result.exit_code == 1
        assert seeded.get_table("AppointmentBills") == {}

    def test_update_record(self, seeded):
        runner.invoke(app, ["add-record", "10", "1", "A001"])
        result = runner.invoke(app, ["update-record", "1", "11", "2", "A665"])
        assert result.exit_code == 0
        assert seeded.get_table("AppointmentBills") == {"1": ["1", "11", "2", "A665"]}

    def test_update_unknown_record_fails(self, seeded):
        result = runner.invoke(app, ["update-record", "5", "11", "2", "A665"])
        assert result.exit_code == 1

    def test_remove_record(self, seeded):
        runner.invoke(app, ["add-record", "10", "1", "A001"])
        result = runner.invoke(app, ["remove-record", "1"])
        assert result.exit_code == 0
        assert seeded.get_table("AppointmentBills") == {}

    def test_flag(self, seeded):
        result = runner.invoke(app, ["flag", "10", "2"])
        assert result.exit_code == 0
        assert seeded.get_table("Appointments")["10"][3] == "2"

    def test_flag_unknown_appointment(self, seeded):
        result = runner.invoke(app, ["flag", "99", "2"])
        assert result.exit_code == 1


class TestGenerateAndReconcile:
    def test_generate(self, seeded, settings):
        runner.invoke(app, ["add-record", "10", "1", "A001"])

        result = runner.invoke(app, ["generate", "2023", "5"])
        assert result.exit_code == 0
        assert (settings.output_dir / "202305MonthlyBillingFile").read_text() == (
            "202305101234567890MA00100000337000\n"
        )

    def test_generate_rejects_bad_month(self, seeded):
        result = runner.invoke(app, ["generate", "2023", "13"])
        assert result.exit_code != 0

    def test_reconcile(self, seeded, settings):
        (settings.output_dir / "202305govFile.txt").write_text(
            "202305101234567890MA00100000500000PAID\n"
            "202305229876543210ABFA66500000200000FHCV\n"
        )

        result = runner.invoke(app, ["reconcile", "202305govFile.txt"])
        assert result.exit_code == 0
        assert "Total Billed : 70.00" in result.stdout
        assert "Doe,Jane" in result.stdout

    def test_reconcile_json(self, seeded, settings):
        (settings.output_dir / "govFile.txt").write_text("202305101234567890MA00100000500000PAID\n")

        result = runner.invoke(app, ["reconcile", "--json"])
        assert result.exit_code == 0
        assert '"total_encounters": 1' in result.stdout

    def test_reconcile_missing_file(self, seeded):
        result = runner.invoke(app, ["reconcile", "nope.txt"])
        assert result.exit_code == 1

    def test_summary(self, seeded, settings):
        (settings.output_dir / "202305govFile.txt").write_text("202305101234567890MA00100000500000DECL\n")

        result = runner.invoke(app, ["summary", "202305"])
        assert result.exit_code == 0
        assert "Total Received : 0.00" in result.stdout

    def test_events(self, seeded):
        runner.invoke(app, ["add-record", "10", "1", "A001"])
        result = runner.invoke(app, ["events", "--limit", "5"])
        assert result.exit_code == 0
        assert "AddNewRecord" in result.stdout
