"""Integration tests for the delete CLI command."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from cfdelete.cli import main as cli_main_module
from cfdelete.cli.main import app
from cfdelete.cloudflare.errors import NotAuthorizedError, RemoteError
from tests.fixtures.workers import FakeCatalog, d1_binding, kv_binding


@pytest.fixture
def runner() -> CliRunner:
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def catalog() -> FakeCatalog:
    catalog = FakeCatalog(
        {
            "billing-svc": [kv_binding("ns-1", name="CACHE"), d1_binding("db-7")],
            "reports-svc": [kv_binding("ns-1", name="REPORTS")],
        }
    )
    catalog.display_names["ns-1"] = "billing-cache"
    catalog.display_names["db-7"] = "billing-db"
    return catalog


@pytest.fixture(autouse=True)
def cli_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, catalog: FakeCatalog) -> Path:
    """Isolate the CLI from the real environment and API."""
    config_path = tmp_path / "config.yaml"
    monkeypatch.setenv("CF_DELETE_WORKER_CONFIG", str(config_path))
    monkeypatch.setenv("CLOUDFLARE_API_TOKEN", "test-token")
    for name in (
        "CLOUDFLARE_API_KEY",
        "CLOUDFLARE_EMAIL",
        "CLOUDFLARE_ACCOUNT_ID",
        "CF_DELETE_WORKER_MAX_WORKERS",
        "CF_DELETE_WORKER_LOG_LEVEL",
        "CF_DELETE_WORKER_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(cli_main_module, "create_client", lambda *args, **kwargs: catalog)
    return config_path


class TestDeleteCommand:
    """Test suite for the delete command."""

    def test_json_plan(self, runner: CliRunner, catalog: FakeCatalog) -> None:
        result = runner.invoke(app, ["billing-svc", "--json", "--no-audit"])

        assert result.exit_code == 0
        plan = json.loads(result.stdout)
        assert plan["worker"]["name"] == "billing-svc"
        assert plan["has_shared_resources"] is True
        resources = {r["resource_key"]: r for r in plan["resources_to_delete"]}
        assert resources["kv:ns-1"]["used_by"] == ["billing-svc", "reports-svc"]
        assert resources["kv:ns-1"]["risk_level"] == "Caution"
        assert resources["d1:db-7"]["resource_name"] == "billing-db"
        assert catalog.delete_calls == []

    def test_json_exclusive_only(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["billing-svc", "--json", "--exclusive-only", "--no-audit"])

        plan = json.loads(result.stdout)
        assert [r["resource_key"] for r in plan["resources_to_delete"]] == ["d1:db-7"]
        assert plan["has_shared_resources"] is False

    def test_dry_run(self, runner: CliRunner, catalog: FakeCatalog) -> None:
        result = runner.invoke(app, ["billing-svc", "--dry-run", "--no-audit"])

        assert result.exit_code == 0
        assert "DRY RUN - No changes were made" in result.output
        assert catalog.delete_calls == []

    def test_yes_deletes_everything(self, runner: CliRunner, catalog: FakeCatalog) -> None:
        result = runner.invoke(app, ["billing-svc", "--yes", "--no-audit"])

        assert result.exit_code == 0
        assert catalog.delete_calls == [
            ("delete_worker", "billing-svc"),
            ("delete_kv_namespace", "ns-1"),
            ("delete_d1_database", "db-7"),
        ]
        assert catalog.calls_to("close") == [""]

    def test_yes_with_exclusive_only_keeps_shared(self, runner: CliRunner, catalog: FakeCatalog) -> None:
        result = runner.invoke(app, ["billing-svc", "--yes", "--exclusive-only", "--no-audit"])

        assert result.exit_code == 0
        assert ("delete_kv_namespace", "ns-1") not in catalog.delete_calls
        assert ("delete_d1_database", "db-7") in catalog.delete_calls

    def test_confirm_declines_shared(self, runner: CliRunner, catalog: FakeCatalog) -> None:
        result = runner.invoke(app, ["billing-svc", "--no-audit"], input="y\nn\n")

        assert result.exit_code == 0
        assert catalog.delete_calls == [("delete_worker", "billing-svc"), ("delete_d1_database", "db-7")]

    def test_confirm_declined(self, runner: CliRunner, catalog: FakeCatalog) -> None:
        result = runner.invoke(app, ["billing-svc", "--no-audit"], input="n\n")

        assert result.exit_code == 0
        assert "Cancelled" in result.output
        assert catalog.delete_calls == []

    def test_partial_failure_exit_code(self, runner: CliRunner, catalog: FakeCatalog) -> None:
        catalog.delete_errors["db-7"] = RemoteError("database busy", 400)

        result = runner.invoke(app, ["billing-svc", "--yes", "--no-audit"])

        assert result.exit_code == 1
        assert "database busy" in result.output
        assert ("delete_kv_namespace", "ns-1") in catalog.delete_calls

    def test_worker_not_found(self, runner: CliRunner, catalog: FakeCatalog) -> None:
        result = runner.invoke(app, ["ghost", "--yes", "--no-audit"])

        assert result.exit_code == 2
        assert "not found" in result.output
        assert catalog.delete_calls == []

    def test_api_error_exit_code(self, runner: CliRunner, catalog: FakeCatalog) -> None:
        def failing_get_worker(name: str):
            raise NotAuthorizedError("Authentication error", 403)

        catalog.get_worker = failing_get_worker

        result = runner.invoke(app, ["billing-svc", "--yes", "--no-audit"])

        assert result.exit_code == 2
        assert "Cloudflare API error" in result.output

    def test_missing_credentials(self, runner: CliRunner, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("CLOUDFLARE_API_TOKEN")

        result = runner.invoke(app, ["billing-svc", "--yes"])

        assert result.exit_code == 2
        assert "Authentication failed" in result.output

    def test_out_of_range_setting_exit_code(
        self, runner: CliRunner, catalog: FakeCatalog, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CF_DELETE_WORKER_MAX_WORKERS", "0")

        result = runner.invoke(app, ["billing-svc", "--json", "--no-audit"])

        assert result.exit_code == 2
        assert "Invalid configuration" in result.output
        assert catalog.calls == []

    def test_invalid_config_file_exit_code(self, runner: CliRunner, cli_env: Path) -> None:
        cli_env.write_text("timeout: soon\n")

        result = runner.invoke(app, ["billing-svc", "--yes", "--no-audit"])

        assert result.exit_code == 2
        assert "timeout" in result.output

    def test_audit_log_written(self, runner: CliRunner, cli_env: Path, tmp_path: Path) -> None:
        audit_dir = tmp_path / "audit"
        cli_env.write_text(f"audit_dir: {audit_dir}\n")

        result = runner.invoke(app, ["billing-svc", "--yes", "--quiet"])

        assert result.exit_code == 0
        assert len(list(audit_dir.glob("*/*/run-*.yaml"))) == 1

    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "cf-delete-worker version" in result.output
