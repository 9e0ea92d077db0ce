import logging
from unittest.mock import patch

from config import Config
from exceptions import (
    AIServiceError,
    AuthenticationError,
    EMRConnectionError,
    EMRDataError,
    InvalidRequest,
    NotFound,
    TokenRevoked,
    handle_medsight_exception,
)
from logging_config import TokenMaskingFilter, mask_tokens, setup_logging
from token_broker import PrescriptionTokenBroker

class TestConfig:
    """Test environment-driven configuration"""

    def test_defaults(self):
        with patch.dict("os.environ", {}, clear=True):
            config = Config.from_env()

        assert config.app.port == 4000
        assert config.app.cors_origins == ["*"]
        assert config.emr.base_url == "https://hackathon-api.aheadafrica.org"
        assert config.local_store.encounter_id_offset == 1000
        assert config.local_store.medication_id_offset == 2000
        assert config.tokens.ttl_hours == 48
        assert config.tokens.token_prefix == "MS-RX-P"

    def test_environment_overrides(self):
        env = {
            "DORRA_API_BASE_URL": "https://emr.example/",
            "DORRA_API_TOKEN": "abc",
            "OLLAMA_API_KEY": "key",
            "CORS_ORIGINS": "http://a.test, http://b.test",
            "SEED_ON_STARTUP": "false",
            "PHARMACY_TOKEN_TTL_HOURS": "12"
        }
        with patch.dict("os.environ", env, clear=True):
            config = Config.from_env()

        assert config.emr.base_url == "https://emr.example"
        assert config.emr.api_token == "abc"
        assert config.ai.primary_api_key == "key"
        assert config.app.cors_origins == ["http://a.test", "http://b.test"]
        assert config.app.seed_on_startup is False
        assert config.tokens.ttl_hours == 12

class TestExceptionMapping:
    """Test exception to HTTP status mapping"""

    def test_status_codes(self):
        assert handle_medsight_exception(EMRConnectionError("down"))[0] == 503
        assert handle_medsight_exception(InvalidRequest("bad"))[0] == 400
        assert handle_medsight_exception(NotFound("missing"))[0] == 404
        assert handle_medsight_exception(TokenRevoked("gone"))[0] == 410
        assert handle_medsight_exception(AuthenticationError("who"))[0] == 401
        assert handle_medsight_exception(AIServiceError("busy"))[0] == 503

    def test_emr_data_error_uses_upstream_status(self):
        assert handle_medsight_exception(EMRDataError("x", details={"status_code": 422}))[0] == 422
        assert handle_medsight_exception(EMRDataError("x"))[0] == 502

    def test_body_shape(self):
        status, body = handle_medsight_exception(TokenRevoked("Token has been revoked"))

        assert body == {
            "status": "error",
            "error": "Token has been revoked",
            "error_code": "TOKEN_REVOKED",
            "details": {}
        }

class TestTokenMasking:
    """Issued pharmacy tokens must not be written to logs in full"""

    def test_mask_issued_token(self):
        assert mask_tokens("Issued MS-RX-P107ABCDEFGH for 107") == "Issued MS-RX-P…EFGH for 107"

    def test_demo_tokens_untouched(self):
        assert mask_tokens("/api/pharmacy/prescription/DEMO-001") == "/api/pharmacy/prescription/DEMO-001"

    def test_filter_rewrites_formatted_message(self):
        record = logging.LogRecord(
            "token_broker", logging.INFO, __file__, 1,
            "Revoked prescription token %s", ("MS-RX-P107ABCDEFGH",), None
        )

        assert TokenMaskingFilter().filter(record) is True
        assert record.getMessage() == "Revoked prescription token MS-RX-P…EFGH"

    def test_subject_with_dash_is_fully_masked(self):
        token = PrescriptionTokenBroker(ns_clock=lambda: 1_700_000_000_000_000_000).issue_token("patient-9").token
        masked = mask_tokens(f"opened {token}")

        assert token not in masked
        assert masked == f"opened MS-RX-P…{token[-4:]}"

    def test_masking_is_stable(self):
        once = mask_tokens("MS-RX-PPATIENT-9FR5HUGNF")
        assert mask_tokens(once) == once == "MS-RX-P…UGNF"

    def test_custom_prefix(self):
        assert mask_tokens("token RX-AB12CD34", prefix="RX-") == "token RX-…CD34"

    def test_uvicorn_access_logger_is_masked(self):
        setup_logging(enable_console=False)
        setup_logging(enable_console=False)
        access = logging.getLogger("uvicorn.access")
        token = "MS-RX-PPATIENT-9FR5HUGNF"
        record = access.makeRecord(
            "uvicorn.access", logging.INFO, __file__, 1,
            '%s - "%s %s HTTP/%s" %d',
            ("127.0.0.1:5000", "GET", f"/api/pharmacy/prescription/{token}", "1.1", 200),
            None
        )

        assert len([f for f in access.filters if isinstance(f, TokenMaskingFilter)]) == 1
        assert access.filter(record)
        assert record.args[2] == "/api/pharmacy/prescription/MS-RX-P…UGNF"
        assert record.args[4] == 200
        assert token not in record.getMessage()
