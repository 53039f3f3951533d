"""Unit tests for the command line interface."""

import json

import pytest
from click.testing import CliRunner

from bucket_provisioner.cli.main import cli
from bucket_provisioner.features.provisioning.service import ProvisioningService


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def patched_service(monkeypatch, service: ProvisioningService) -> ProvisioningService:
    """Route every command to the in-memory service."""
    for module in ("buckets", "access"):
        monkeypatch.setattr(
            f"bucket_provisioner.cli.commands.{module}.get_provisioning_service",
            lambda: service,
        )
    return service


class TestDriverInfo:
    def test_prints_driver_name(self, runner, monkeypatch):
        monkeypatch.setenv("PROVISIONER_DRIVER_PREFIX", "cluster-a")

        result = runner.invoke(cli, ["driver-info"])

        assert result.exit_code == 0
        assert result.output.strip() == "cluster-a.ceph.objectstorage.k8s.io"

    def test_fails_without_prefix(self, runner):
        result = runner.invoke(cli, ["driver-info"])

        assert result.exit_code == 1


class TestConfigShow:
    def test_json_hides_secrets(self, runner, monkeypatch):
        monkeypatch.setenv("PROVISIONER_SECRET_KEY", "very-secret")

        result = runner.invoke(cli, ["config", "show", "--format", "json"])

        assert result.exit_code == 0
        assert "very-secret" not in result.output
        assert '"secret_key": "***"' in result.output

    def test_show_secrets(self, runner, monkeypatch):
        monkeypatch.setenv("PROVISIONER_SECRET_KEY", "very-secret")

        result = runner.invoke(cli, ["config", "show", "--format", "json", "--show-secrets"])

        assert result.exit_code == 0
        assert "very-secret" in result.output


class TestBucketCommands:
    def test_create(self, runner, patched_service, backends):
        result = runner.invoke(cli, ["bucket", "create", "b1", "--param", "region=eu-1"])

        assert result.exit_code == 0
        assert "b1" in result.output
        assert backends.storage.buckets == {"b1"}
        assert backends.builds[0]["region"] == "eu-1"

    def test_create_conflict_exits_nonzero(self, runner, patched_service, backends):
        backends.storage.add_bucket("b1")

        result = runner.invoke(cli, ["bucket", "create", "b1"])

        assert result.exit_code == 1
        assert "already-exists" in result.output

    def test_malformed_param(self, runner, patched_service):
        result = runner.invoke(cli, ["bucket", "create", "b1", "--param", "no-equals"])

        assert result.exit_code == 2

    def test_delete(self, runner, patched_service, backends):
        backends.storage.add_bucket("b1")

        result = runner.invoke(cli, ["bucket", "delete", "b1"])

        assert result.exit_code == 0
        assert backends.storage.buckets == set()


class TestAccessCommands:
    def test_grant_prints_credentials(self, runner, patched_service, backends):
        backends.storage.add_bucket("b1")

        result = runner.invoke(cli, ["access", "grant", "b1", "alice"])

        assert result.exit_code == 0
        body = json.loads(result.output)
        assert body["accountId"] == "alice"
        assert body["credentials"]["s3"]["accessKeyID"]
        assert body["credentials"]["s3"]["endpoint"] == "http://rgw.test:8080"

    def test_revoke(self, runner, patched_service, backends):
        backends.storage.add_bucket("b1")
        runner.invoke(cli, ["access", "grant", "b1", "alice"])

        result = runner.invoke(cli, ["access", "revoke", "b1", "alice"])

        assert result.exit_code == 0
        assert "alice" not in backends.admin.accounts
