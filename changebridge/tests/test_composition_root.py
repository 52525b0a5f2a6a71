"""Integration tests for configuration loading and the composition root."""

import json
import os
from unittest.mock import patch

import httpx
import pytest
from pydantic import ValidationError

from changebridge import main as main_module
from changebridge.adapter import ChangeRequestAdapter
from changebridge.adapters.transport.servicenow import ServiceNowConnector
from changebridge.config import Settings, load_settings
from changebridge.core.errors import TransportError
from changebridge.tests.fakes import FakeTransportPort, json_response


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch) -> None:
    """Run without a stray .env file or settings exported in the shell."""
    monkeypatch.chdir(tmp_path)
    for name in Settings.model_fields:
        monkeypatch.delenv(name.upper(), raising=False)


class TestConfigurationLoading:
    """Test configuration loading and validation."""

    def test_load_settings_with_defaults(self) -> None:
        settings = load_settings()
        assert settings.adapter_id == "servicenow"
        assert settings.servicenow_table == "change_request"
        assert settings.run_mode == "healthcheck"
        assert settings.log_level == "INFO"

    def test_load_settings_from_env(self) -> None:
        with patch.dict(
            os.environ,
            {
                "ADAPTER_ID": "snow-prod",
                "SERVICENOW_URL": "https://prod.service-now.com/",
                "SERVICENOW_USERNAME": "integration",
                "SERVICENOW_PASSWORD": "pw",
                "RUN_MODE": "get",
                "RECORD_SELECTOR": "CHG0000001",
            },
        ):
            settings = load_settings()
            assert settings.adapter_id == "snow-prod"
            assert settings.servicenow_url == "https://prod.service-now.com"
            assert settings.run_mode == "get"
            assert settings.record_selector == "CHG0000001"

    def test_load_settings_from_env_file(self, tmp_path) -> None:
        env_file = tmp_path / "test.env"
        env_file.write_text("ADAPTER_ID=from-file\nSERVICENOW_TABLE=change_task\n")
        settings = load_settings(str(env_file))
        assert settings.adapter_id == "from-file"
        assert settings.servicenow_table == "change_task"

    def test_load_settings_reads_dotenv_in_working_directory(self, tmp_path) -> None:
        (tmp_path / ".env").write_text("ADAPTER_ID=from-dotenv\n")
        assert load_settings().adapter_id == "from-dotenv"

    def test_rejects_url_without_scheme(self) -> None:
        with patch.dict(os.environ, {"SERVICENOW_URL": "dev12345.service-now.com"}):
            with pytest.raises(ValidationError, match="servicenow_url"):
                load_settings()

    def test_rejects_non_positive_timeout(self) -> None:
        with patch.dict(os.environ, {"REQUEST_TIMEOUT_SECONDS": "0"}):
            with pytest.raises(ValidationError, match="request_timeout_seconds"):
                load_settings()

    def test_adapter_properties(self) -> None:
        settings = Settings(
            servicenow_url="https://x.service-now.com",
            servicenow_username="u",
            servicenow_password="p",
        )
        props = settings.adapter_properties()
        assert props.url == "https://x.service-now.com"
        assert props.username == "u"
        assert props.service_now_table == "change_request"


class TestBuildAdapter:
    @pytest.mark.asyncio
    async def test_build_adapter_wires_connector(self) -> None:
        settings = Settings(adapter_id="snow-1", request_timeout_seconds=5)
        adapter = main_module.build_adapter(settings)
        try:
            assert isinstance(adapter, ChangeRequestAdapter)
            assert adapter.id == "snow-1"
            assert isinstance(adapter.connector, ServiceNowConnector)
            assert adapter.connector.timeout == 5
        finally:
            await adapter.close()


def _adapter_with(transport: FakeTransportPort, settings: Settings) -> ChangeRequestAdapter:
    return ChangeRequestAdapter(
        settings.adapter_id, settings.adapter_properties(), transport=transport
    )


class TestBootstrap:
    """Test run modes with the transport replaced by a fake."""

    @pytest.fixture(autouse=True)
    def _no_logging_setup(self, monkeypatch) -> None:
        # basicConfig would attach a stdout handler and pollute captured output
        monkeypatch.setattr(main_module, "configure_logging", lambda level, fmt: None)

    @pytest.mark.asyncio
    async def test_healthcheck_mode_online(self, capsys) -> None:
        settings = Settings(adapter_id="snow-1", run_mode="healthcheck")
        transport = FakeTransportPort()
        with patch.object(
            main_module, "build_adapter", lambda s: _adapter_with(transport, s)
        ):
            code = await main_module.bootstrap(settings)

        assert code == 0
        assert json.loads(capsys.readouterr().out) == {"id": "snow-1", "status": "ONLINE"}
        assert transport.closed

    @pytest.mark.asyncio
    async def test_healthcheck_mode_offline(self, capsys) -> None:
        settings = Settings(adapter_id="snow-1", run_mode="healthcheck")
        transport = FakeTransportPort()
        transport.set_hibernating(True)
        with patch.object(
            main_module, "build_adapter", lambda s: _adapter_with(transport, s)
        ):
            code = await main_module.bootstrap(settings)

        assert code == 1
        assert json.loads(capsys.readouterr().out)["status"] == "OFFLINE"

    @pytest.mark.asyncio
    async def test_get_mode_prints_tickets(self, capsys) -> None:
        settings = Settings(run_mode="get", record_selector="2")
        transport = FakeTransportPort(
            get_response=json_response([{"number": "CHG1"}, {"number": "CHG2"}])
        )
        with patch.object(
            main_module, "build_adapter", lambda s: _adapter_with(transport, s)
        ):
            code = await main_module.bootstrap(settings)

        assert code == 0
        assert transport.get_calls == ["2"]
        assert json.loads(capsys.readouterr().out) == [
            {"change_ticket_number": "CHG1"},
            {"change_ticket_number": "CHG2"},
        ]

    @pytest.mark.asyncio
    async def test_post_mode_prints_ticket(self, capsys) -> None:
        settings = Settings(run_mode="post")
        transport = FakeTransportPort(
            post_response=json_response({"number": "CHG3", "sys_id": "k"})
        )
        with patch.object(
            main_module, "build_adapter", lambda s: _adapter_with(transport, s)
        ):
            code = await main_module.bootstrap(settings)

        assert code == 0
        assert json.loads(capsys.readouterr().out) == {
            "change_ticket_number": "CHG3",
            "change_ticket_key": "k",
        }

    @pytest.mark.asyncio
    async def test_get_mode_transport_failure(self) -> None:
        settings = Settings(run_mode="get")
        transport = FakeTransportPort()
        transport.set_error(TransportError("down"))
        with patch.object(
            main_module, "build_adapter", lambda s: _adapter_with(transport, s)
        ):
            assert await main_module.bootstrap(settings) == 1

    @pytest.mark.asyncio
    async def test_bootstrap_against_mock_http(self, capsys) -> None:
        settings = Settings(adapter_id="snow-http", run_mode="healthcheck")

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"result": [{"number": "CHG1"}]})

        def build(s: Settings) -> ChangeRequestAdapter:
            props = s.adapter_properties()
            connector = ServiceNowConnector(
                url=props.url,
                username=props.username,
                password=props.password,
                service_now_table=props.service_now_table,
                http_transport=httpx.MockTransport(handler),
            )
            return ChangeRequestAdapter(s.adapter_id, props, transport=connector)

        with patch.object(main_module, "build_adapter", build):
            code = await main_module.bootstrap(settings)

        assert code == 0
        assert json.loads(capsys.readouterr().out)["status"] == "ONLINE"
