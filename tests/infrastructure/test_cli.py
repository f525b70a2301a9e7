"""End-to-end tests for the click CLI against a temporary SQLite store."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from checkout.infrastructure.cli.main import cli

SEED_FILE = Path(__file__).resolve().parents[2] / "data" / "products.json"


@pytest.fixture
def invoke(tmp_path, monkeypatch):
    for name in ("CHECKOUT_STRIPE_SECRET_KEY", "CHECKOUT_STRIPE_WEBHOOK_SECRET"):
        monkeypatch.delenv(name, raising=False)
    url = f"sqlite:///{tmp_path / 'cli.db'}"
    runner = CliRunner()

    def _invoke(*args: str):
        return runner.invoke(cli, ["--database-url", url, *args])

    result = _invoke("db", "init", "--seed", str(SEED_FILE))
    assert result.exit_code == 0, result.output
    return _invoke


def _create(invoke, items: str = "2:1", *extra: str):
    return invoke(
        "order", "create",
        "--customer", "Ayesha",
        "--phone", "03001234567",
        "--city", "Lahore",
        "--address", "12 Mall Road",
        "--items", items,
        *extra,
    )


class TestCatalog:

    def test_seeded_products_listed(self, invoke):
        result = invoke("product", "list")
        assert result.exit_code == 0
        assert "Ocean Blue" in result.output
        assert "Rs. 3,800" in result.output  # Intense Wood sale price
        assert "Jasmine Nights" in result.output


class TestOrderCommands:

    def test_create_manual_order(self, invoke):
        result = _create(invoke, "2:1,7:2", "--gift-wrapping", "premium")
        assert result.exit_code == 0, result.output
        assert "Order #1 created" in result.output
        assert "Ocean Blue" in result.output
        assert "Rs. 10,200" in result.output
        assert "https://wa.me/923001234567?text=" in result.output

    def test_create_json_output(self, invoke):
        result = _create(invoke, "2:1", "--json")
        assert result.exit_code == 0, result.output
        assert '"channel": "manual"' in result.output
        assert '"order_id": 1' in result.output

    def test_show_and_update_status(self, invoke):
        _create(invoke)
        shown = invoke("order", "show", "--id", "1")
        assert shown.exit_code == 0
        assert "status=pending_manual_confirmation" in shown.output

        updated = invoke("order", "status", "--id", "1", "--status", "confirmed")
        assert updated.exit_code == 0, updated.output
        assert "status=confirmed" in updated.output

    def test_illegal_transition_is_an_error(self, invoke):
        _create(invoke)
        result = invoke("order", "status", "--id", "1", "--status", "delivered")
        assert result.exit_code == 1
        assert "Cannot move order #1" in result.output

    def test_out_of_stock_is_an_error(self, invoke):
        result = _create(invoke, "4:999")
        assert result.exit_code == 1
        assert '"Dark Ember" - only 28 left in stock' in result.output

    def test_json_failure_prints_error_body(self, invoke):
        result = _create(invoke, "4:999", "--json")
        assert result.exit_code == 1
        # Log lines may share the captured output; the JSON body comes last.
        text = result.output
        body = json.loads(text[text.index("{\n"):])
        assert body["status"] == 422
        assert body["error"]["kind"] == "insufficient_stock"
        assert "Dark Ember" in body["error"]["message"]

    def test_card_without_processor_is_an_error(self, invoke):
        result = _create(invoke, "2:1", "--payment-method", "card")
        assert result.exit_code == 1
        assert "Invalid payment method" in result.output

    def test_unknown_order(self, invoke):
        result = invoke("order", "show", "--id", "99")
        assert result.exit_code == 1
        assert "Order #99 not found" in result.output

    def test_bad_items_format(self, invoke):
        result = _create(invoke, "Ocean Blue")
        assert result.exit_code == 2
        assert "ProductId:Quantity" in result.output


class TestWebhookCommand:

    def test_requires_processor_configuration(self, invoke, tmp_path):
        payload = tmp_path / "event.json"
        payload.write_text("{}")
        result = invoke("webhook", "receive", "--payload", str(payload), "--signature", "t=1,v1=x")
        assert result.exit_code == 1
        assert "not configured" in result.output
