"""
Unit tests for the command line entry point.

uvicorn.run and create_app are replaced so nothing binds a port or
talks to S3.
"""

import logging

import pytest

from s3gateway import cli
from s3gateway.config.settings import Settings
from s3gateway.infrastructure.storage.client import StorageError
from s3gateway.main import PACKAGE_LOGGER, configure_logging


class TestParser:
    """Flag names and precedence over the environment."""

    def test_omitted_flags_are_none(self):
        args = cli.build_parser().parse_args([])

        assert all(value is None for value in vars(args).values())

    def test_all_flags(self):
        args = cli.build_parser().parse_args([
            "--port", "9000",
            "--username", "alice",
            "--password", "s3cret",
            "--realm", "Staging",
            "--bucket", "my-site",
            "--prefix", "public",
            "--max-age", "600",
            "--verbose",
            "--index-file", "default.htm",
        ])

        settings = cli.load_settings(args)

        assert settings.port == "9000"
        assert settings.username == "alice"
        assert settings.password == "s3cret"
        assert settings.realm == "Staging"
        assert settings.bucket == "my-site"
        assert settings.prefix == "public"
        assert settings.max_age == 600
        assert settings.verbose is True
        assert settings.index_file == "default.htm"

    def test_flag_overrides_environment(self, monkeypatch):
        monkeypatch.setenv("PORT", "9000")
        monkeypatch.setenv("BUCKET", "env-bucket")

        args = cli.build_parser().parse_args(["--port", "7000"])
        settings = cli.load_settings(args)

        assert settings.port == "7000"
        assert settings.bucket == "env-bucket"

    def test_environment_used_without_flag(self, monkeypatch):
        monkeypatch.setenv("INDEX", "home.htm")
        monkeypatch.setenv("VERBOSE", "1")

        settings = cli.load_settings(cli.build_parser().parse_args([]))

        assert settings.index_file == "home.htm"
        assert settings.verbose is True

    def test_max_age_must_be_integer(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["--max-age", "soon"])


class TestMain:
    """Startup sequence and exit codes."""

    def test_runs_uvicorn_on_configured_port(self, monkeypatch):
        calls = {}
        sentinel_app = object()

        monkeypatch.setattr(cli, "create_app", lambda settings: sentinel_app)
        monkeypatch.setattr(cli.uvicorn, "run", lambda app, **kwargs: calls.update(app=app, **kwargs))

        exit_code = cli.main(["--bucket", "my-site", "--port", "9090"])

        assert exit_code == 0
        assert calls["app"] is sentinel_app
        assert calls["port"] == 9090
        assert calls["host"] == "0.0.0.0"

    def test_store_failure_exits_before_listening(self, monkeypatch):
        def failing_create_app(settings):
            raise StorageError("No AWS credentials found")

        def unexpected_run(*args, **kwargs):
            raise AssertionError("server must not start")

        monkeypatch.setattr(cli, "create_app", failing_create_app)
        monkeypatch.setattr(cli.uvicorn, "run", unexpected_run)

        assert cli.main(["--bucket", "my-site"]) == 1

    def test_invalid_configuration_exits_with_error(self, monkeypatch, capsys):
        monkeypatch.setenv("PORT", "not-a-port")
        monkeypatch.setattr(cli.uvicorn, "run", lambda *a, **k: None)

        assert cli.main([]) == 1
        assert "invalid configuration" in capsys.readouterr().err

    def test_unknown_log_level_exits_with_error(self, monkeypatch, capsys):
        monkeypatch.setenv("LOG_LEVEL", "loud")
        monkeypatch.setattr(cli.uvicorn, "run", lambda *a, **k: None)

        assert cli.main(["--bucket", "my-site"]) == 1
        assert "invalid configuration" in capsys.readouterr().err

    def test_mock_mode_builds_real_app(self, monkeypatch):
        """End to end through create_app with the in-memory store."""
        calls = {}
        monkeypatch.setenv("STORAGE_MOCK_MODE", "true")
        monkeypatch.setattr(cli.uvicorn, "run", lambda app, **kwargs: calls.update(app=app))

        assert cli.main(["--verbose"]) == 0
        assert calls["app"].state.settings.storage_mock_mode is True


class TestConfigureLogging:
    """Verbose diagnostics stay visible under a strict LOG_LEVEL."""

    @pytest.fixture(autouse=True)
    def restore_package_logger(self):
        package_logger = logging.getLogger(PACKAGE_LOGGER)
        original_level = package_logger.level
        yield
        package_logger.setLevel(original_level)

    def test_verbose_lowers_package_logger_to_info(self):
        settings = Settings(_env_file=None, verbose=True, log_level="WARNING")

        configure_logging(settings)

        assert logging.getLogger("s3gateway.api.routes.objects").isEnabledFor(logging.INFO)

    def test_verbose_keeps_debug_level(self):
        logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG)
        settings = Settings(_env_file=None, verbose=True, log_level="DEBUG")

        configure_logging(settings)

        assert logging.getLogger(PACKAGE_LOGGER).level == logging.DEBUG

    def test_without_verbose_package_level_is_untouched(self):
        logging.getLogger(PACKAGE_LOGGER).setLevel(logging.NOTSET)
        settings = Settings(_env_file=None, log_level="WARNING")

        configure_logging(settings)

        assert logging.getLogger(PACKAGE_LOGGER).level == logging.NOTSET
