"""End-to-end tests for the click CLI against a JSON store in tmp_path."""

import json

import pytest
from click.testing import CliRunner

from printshop.infrastructure.cli.main import cli
from printshop.infrastructure.config import get_settings

SHIRTS = "with_collar:100:S=2,M=3:Azul:stamping@front_right=50"
BANNER = "Banner:2x1m:vinyl_white:1500"


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.setenv("PRINTSHOP_DATA_DIR", str(tmp_path))
    get_settings.cache_clear()
    yield CliRunner()
    get_settings.cache_clear()


def _add_client(runner: CliRunner) -> str:
    result = runner.invoke(
        cli, ["client", "add", "--name", "Maria Tembe", "--nuit", "400123456", "--contact", "841234567"]
    )
    assert result.exit_code == 0, result.output
    return result.output.split()[1]


def _create_order(runner: CliRunner, client_id: str, *extra: str):
    return runner.invoke(
        cli,
        [
            "order", "create",
            "--name", "Camisetes escola",
            "--client-id", client_id,
            "--due-date", "2026-05-01",
            "--garment", SHIRTS,
            "--impression", BANNER,
            *extra,
        ],
    )


def _order_id(output: str) -> str:
    return output.splitlines()[0].split()[1]


class TestClientCommands:

    def test_add_and_list(self, runner):
        _add_client(runner)
        result = runner.invoke(cli, ["client", "list"])
        assert result.exit_code == 0
        assert "Maria Tembe" in result.output

    def test_add_rejects_blank_name(self, runner):
        result = runner.invoke(
            cli, ["client", "add", "--name", " ", "--nuit", "1", "--contact", "2"]
        )
        assert result.exit_code == 1
        assert "Client name is required" in result.output

    def test_empty_list(self, runner):
        result = runner.invoke(cli, ["client", "list"])
        assert "No clients found." in result.output


class TestOrderCreate:

    def test_create_prices_the_order(self, runner):
        client_id = _add_client(runner)
        result = _create_order(runner, client_id)

        assert result.exit_code == 0, result.output
        assert "created" in result.output
        # (100 + 50) * 5 + 1500 = 2250, plus 16% IVA
        assert "2,250.00 MZN" in result.output
        assert "2,610.00 MZN" in result.output

    def test_create_removes_the_placeholder_client(self, runner, tmp_path):
        client_id = _add_client(runner)
        _create_order(runner, client_id)

        store = json.loads((tmp_path / "store.json").read_text())
        assert [c["id"] for c in store["clients"]] == [client_id]
        assert len(store["orders"]) == 1
        assert not store["orders"][0]["is_placeholder"]

    def test_failed_create_leaves_nothing_behind(self, runner, tmp_path):
        result = _create_order(runner, "no-such-client")

        assert result.exit_code == 1
        assert "Could not save order" in result.output
        store = json.loads((tmp_path / "store.json").read_text())
        assert store["clients"] == []
        assert store["orders"] == []
        assert store["clothes"] == []

    def test_duplicate_service_is_rejected(self, runner):
        client_id = _add_client(runner)
        result = runner.invoke(
            cli,
            [
                "order", "create",
                "--name", "Camisetes",
                "--client-id", client_id,
                "--garment", SHIRTS + ";stamping@front_right=30",
            ],
        )
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_malformed_garment(self, runner):
        result = runner.invoke(
            cli, ["order", "create", "--name", "X", "--client-id", "c", "--garment", "shirt"]
        )
        assert result.exit_code == 2
        assert "Invalid garment" in result.output


class TestOrderFollowUp:

    def test_list_show_pay_and_status(self, runner):
        client_id = _add_client(runner)
        order_id = _order_id(_create_order(runner, client_id).output)

        listed = runner.invoke(cli, ["order", "list", "--search", "maria"])
        assert "Camisetes escola" in listed.output

        shown = runner.invoke(cli, ["order", "show", "--id", order_id])
        assert shown.exit_code == 0
        assert "Pedido Recebido" in shown.output
        assert "S:2, M:3" in shown.output

        paid = runner.invoke(cli, ["order", "pay", "--id", order_id, "--amount", "610"])
        assert paid.exit_code == 0, paid.output
        assert "Remaining debt: 2,000.00 MZN" in paid.output
        clients = runner.invoke(cli, ["client", "list"])
        assert "2,000.00 MZN" in clients.output

        status = runner.invoke(cli, ["order", "status", "--id", order_id, "--status", "ready"])
        assert "Pedido Pronto pra Entrega" in status.output

        ready = runner.invoke(cli, ["order", "list", "--status", "ready"])
        assert order_id in ready.output

    def test_show_unknown_order(self, runner):
        result = runner.invoke(cli, ["order", "show", "--id", "nope"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_list_without_orders(self, runner):
        result = runner.invoke(cli, ["order", "list"])
        assert "No orders found." in result.output
