"""
Tests for run configuration.

1. Defaults and CI switches
2. .env.defaults fallback (environment wins)
3. Validation of workers and reporters
"""
from pathlib import Path

import pytest

from frontend_e2e.config import RunConfiguration, Timeouts
from frontend_e2e.env_defaults import load_env_defaults
from frontend_e2e.errors import GraphError


@pytest.fixture(autouse=True)
def clear_defaults_cache():
    load_env_defaults.cache_clear()
    yield
    load_env_defaults.cache_clear()


class TestFromEnv:
    def test_local_defaults(self, tmp_path):
        config = RunConfiguration.from_env({}, project_root=tmp_path)

        assert not config.ci
        assert config.base_url == "http://localhost:8081"
        assert config.retries == 0
        assert config.workers == 1
        assert config.reporters == ("list", "json")
        assert config.headless
        assert config.timeouts == Timeouts()
        assert config.timeouts.run == 15 * 60
        assert config.timeouts.scenario == 5 * 60
        assert config.admin_password is None

    def test_ci_switches_retries_and_reporters(self, tmp_path):
        config = RunConfiguration.from_env({"CI": "true"}, project_root=tmp_path)

        assert config.ci
        assert config.retries == 1
        assert config.reporters == ("list", "github", "json")
        assert config.phase("webkit_test_workflow").retries == 1
        assert config.graph()["setup_admin_authentication"].dependencies == {"setup_initial"}

    def test_explicit_retries_win_over_ci(self, tmp_path):
        config = RunConfiguration.from_env({"CI": "1", "E2E_RETRIES": "3"}, project_root=tmp_path)
        assert config.retries == 3

    def test_paths_are_relative_to_project_root(self, tmp_path):
        config = RunConfiguration.from_env({"E2E_AUTH_DIR": "state"}, project_root=tmp_path)
        assert config.auth_dir == tmp_path.resolve() / "state"
        assert config.suites_dir == tmp_path.resolve() / "e2e"
        assert config.phase_output_dir("setup_provisioning") == (
            tmp_path.resolve() / "playwright-test-results" / "setup_provisioning"
        )

    def test_absolute_paths_are_kept(self, tmp_path):
        config = RunConfiguration.from_env({"E2E_OUTPUT_DIR": "/var/tmp/e2e"}, project_root=tmp_path)
        assert config.output_dir == Path("/var/tmp/e2e")

    def test_timeouts_and_flags(self, tmp_path):
        config = RunConfiguration.from_env(
            {
                "E2E_ACTION_TIMEOUT": "2.5",
                "E2E_RUN_TIMEOUT": "60",
                "PLAYWRIGHT_HEADLESS": "false",
                "E2E_STRICT_SESSION_STATE": "yes",
                "E2E_LOG_LEVEL": "debug",
                "RANDOM_PASSWORD": "s3cret",
            },
            project_root=tmp_path,
        )
        assert config.timeouts.action == 2.5
        assert config.timeouts.run == 60
        assert not config.headless
        assert config.strict_session_state
        assert config.log_level == "DEBUG"
        assert config.require_admin_password() == "s3cret"

    def test_env_defaults_file(self, tmp_path):
        (tmp_path / ".env.defaults").write_text(
            "# shared defaults\nE2E_BASE_URL=\"http://frontend:8080\"\nE2E_LOCALE=de\n",
            encoding="utf-8",
        )
        config = RunConfiguration.from_env({"E2E_LOCALE": "fr"}, project_root=tmp_path)
        assert config.base_url == "http://frontend:8080"
        assert config.locale == "fr"

    def test_empty_variable_falls_back(self, tmp_path):
        config = RunConfiguration.from_env({"E2E_BASE_URL": ""}, project_root=tmp_path)
        assert config.base_url == "http://localhost:8081"


class TestValidation:
    def test_workers_must_be_one(self, tmp_path):
        with pytest.raises(ValueError, match="workers"):
            RunConfiguration.from_env({"E2E_WORKERS": "4"}, project_root=tmp_path)

    def test_unknown_reporter(self, tmp_path):
        with pytest.raises(ValueError, match="html"):
            RunConfiguration(project_root=tmp_path, reporters=("list", "html"))

    def test_configuration_is_immutable(self, tmp_path):
        config = RunConfiguration(project_root=tmp_path)
        with pytest.raises(AttributeError):
            config.retries = 2

    def test_missing_admin_password(self, tmp_path):
        with pytest.raises(RuntimeError, match="RANDOM_PASSWORD"):
            RunConfiguration(project_root=tmp_path).require_admin_password()


class TestHelpers:
    def test_url(self, tmp_path):
        config = RunConfiguration(project_root=tmp_path, base_url="http://localhost:8081/")
        assert config.url("/dashboard") == "http://localhost:8081/dashboard"
        assert config.url("login") == "http://localhost:8081/login"

    def test_unknown_phase(self, tmp_path):
        with pytest.raises(GraphError):
            RunConfiguration(project_root=tmp_path).phase("opera_test_workflow")
