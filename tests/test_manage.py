"""
Test suite for manage.py CLI commands.

Run all tests:
    pytest tests/test_manage.py -v
"""

import json
import subprocess
from unittest.mock import patch

from typer.testing import CliRunner

from manage import app, describe_behavior
from paysim.core.services.tokens import TOKEN_BEHAVIORS

runner = CliRunner()


class TestTokensCommand:

    def test_lists_every_token(self):
        result = runner.invoke(app, ["tokens"])

        assert result.exit_code == 0
        assert "tok_visa" in result.stdout
        assert "tok_chargeDeclined" in result.stdout

    def test_filter_by_brand(self):
        result = runner.invoke(app, ["tokens", "--brand", "american express"])

        assert result.exit_code == 0
        assert "tok_amex" in result.stdout
        assert "tok_mastercard" not in result.stdout

    def test_unknown_brand(self):
        result = runner.invoke(app, ["tokens", "-b", "Nonexistent"])

        assert result.exit_code == 1
        assert "No tokens match" in result.stdout


class TestDescribeBehavior:

    def test_plain_card(self):
        assert describe_behavior(TOKEN_BEHAVIORS["tok_visa"]) == "succeeds"

    def test_transport_fault(self):
        assert describe_behavior(TOKEN_BEHAVIORS["tok_429"]) == "fails the request (rate_limit)"

    def test_decline(self):
        assert describe_behavior(TOKEN_BEHAVIORS["tok_chargeDeclined"]) == (
            "declined (generic_decline)"
        )

    def test_forget(self):
        assert describe_behavior(TOKEN_BEHAVIORS["tok_forget"]) == (
            "succeeds, charge not stored"
        )

    def test_dispute(self):
        assert describe_behavior(TOKEN_BEHAVIORS["tok_createDispute"]).startswith(
            "succeeds, then disputed"
        )


class TestRunserverCommand:

    def test_runs_uvicorn(self):
        with patch("manage.subprocess.run") as mock_run:
            result = runner.invoke(app, ["runserver", "--port", "9000"])

        assert result.exit_code == 0
        command = mock_run.call_args[0][0]
        assert command.startswith("uvicorn paysim.main:app")
        assert "--port 9000" in command

    def test_propagates_failure(self):
        with patch(
            "manage.subprocess.run",
            side_effect=subprocess.CalledProcessError(1, "uvicorn"),
        ):
            result = runner.invoke(app, ["runserver"])

        assert result.exit_code != 0


class TestGenerateOpenapiCommand:

    def test_writes_schema(self, tmp_path):
        output = tmp_path / "schema.json"

        result = runner.invoke(app, ["generateopenapi", "--output", str(output)])

        assert result.exit_code == 0
        schema = json.loads(output.read_text(encoding="utf-8"))
        assert schema["info"]["title"] == "paysim"
        assert "/v1/charges" in schema["paths"]
