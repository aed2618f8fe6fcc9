"""
CLI Tests
"""

import pytest
from typer.testing import CliRunner

from codegraph_naming.cli import app

runner = CliRunner()


@pytest.fixture
def project(php_project):
    return php_project(
        {
            "src/Domain/Entity.php": """
                <?php
                namespace App\\Domain;

                abstract class Entity {}
            """,
        }
    )


class TestRunCommand:
    def test_dry_run(self, project):
        result = runner.invoke(app, ["run", str(project), "--dry-run", "--diff", "--log-level", "WARNING"])

        assert result.exit_code == 0
        assert "dry-run" in result.stdout
        assert "AbstractEntity" in result.stdout
        assert (project / "src" / "Domain" / "Entity.php").exists()
        assert not (project / "src" / "Domain" / "AbstractEntity.php").exists()

    def test_apply(self, project):
        result = runner.invoke(app, ["run", str(project), "--log-level", "WARNING"])

        assert result.exit_code == 0
        assert (project / "src" / "Domain" / "AbstractEntity.php").exists()

    def test_policy_filter(self, project):
        result = runner.invoke(app, ["run", str(project), "-n", "-p", "interface-suffix", "--log-level", "WARNING"])

        assert result.exit_code == 0
        assert "No naming violations found." in result.stdout

    def test_unknown_policy_fails(self, project):
        result = runner.invoke(app, ["run", str(project), "-n", "-p", "no-such-policy"])

        assert result.exit_code == 1
        assert "Run failed" in result.stdout

    def test_invalid_config_fails(self, project, tmp_path):
        config = tmp_path / "naming.yaml"
        config.write_text("mode: sometimes\n")

        result = runner.invoke(app, ["run", str(project), "--config", str(config)])

        assert result.exit_code == 1
        assert (project / "src" / "Domain" / "Entity.php").exists()

    def test_config_file(self, project, tmp_path):
        config = tmp_path / "naming.yaml"
        config.write_text("mode: dry-run\nlogging:\n  level: WARNING\n")

        result = runner.invoke(app, ["run", str(project), "--config", str(config)])

        assert result.exit_code == 0
        assert not (project / "src" / "Domain" / "AbstractEntity.php").exists()


class TestPoliciesCommand:
    def test_lists_catalog_and_advisories(self):
        result = runner.invoke(app, ["policies"])

        assert result.exit_code == 0
        assert "abstract-prefix" in result.stdout
        assert "directory-provider" in result.stdout
        assert "domain-action" in result.stdout
