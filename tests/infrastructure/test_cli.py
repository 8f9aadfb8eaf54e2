"""End-to-end tests for the click CLI against a temporary data directory."""

import pytest
from click.testing import CliRunner

from bazaar.infrastructure.cli.main import cli

ADDRESS = ["--street", "1 Main St", "--city", "Springfield", "--state", "IL",
           "--zip", "62701", "--country", "US"]


@pytest.fixture()
def run(tmp_path):
    runner = CliRunner()
    env = {
        "BAZAAR_DATA_DIR": str(tmp_path / "data"),
        "BAZAAR_ENV": "test",
    }

    def invoke(*args):
        return runner.invoke(cli, list(args), env=env)

    return invoke


def _add_mug(run, stock="10"):
    result = run("product", "add", "--name", "Mug", "--price", "12.50", "--stock", stock,
                 "--user", "v1", "--role", "vendor")
    assert result.exit_code == 0, result.output
    return "P0001"


class TestProductCommands:
    def test_add_and_show(self, run):
        _add_mug(run)

        result = run("product", "show", "--id", "P0001")

        assert result.exit_code == 0
        assert "Mug" in result.output
        assert "Stock:   10" in result.output

    def test_customer_cannot_add(self, run):
        result = run("product", "add", "--name", "Mug", "--price", "12.50", "--user", "alice")
        assert result.exit_code == 1
        assert "requires one of" in result.output

    def test_add_variant_and_set_stock(self, run):
        _add_mug(run)
        result = run("product", "add-variant", "--id", "P0001", "--name", "Large", "--price", "15.00",
                     "--stock", "2", "--sku", "MUG-L", "--user", "v1", "--role", "vendor")
        assert result.exit_code == 0, result.output
        assert "P0001-v1" in result.output

        result = run("product", "set-stock", "--id", "P0001", "--variant", "P0001-v1",
                     "--quantity", "7", "--user", "v1", "--role", "vendor")
        assert result.exit_code == 0, result.output
        assert "total 7" in result.output

    def test_list_empty(self, run):
        result = run("product", "list")
        assert "No products found." in result.output

    def test_low_stock(self, run):
        _add_mug(run, stock="3")
        result = run("product", "low-stock", "--user", "v1", "--role", "vendor")
        assert result.exit_code == 0, result.output
        assert "P0001" in result.output
        assert "No products are low on stock." in run("product", "low-stock", "--user", "v2", "--role", "vendor").output

    def test_update_and_remove_variant(self, run):
        _add_mug(run)
        run("product", "add-variant", "--id", "P0001", "--name", "Large", "--price", "15.00",
            "--sku", "MUG-L", "--user", "v1", "--role", "vendor")

        updated = run("product", "update-variant", "--id", "P0001", "--variant", "P0001-v1",
                      "--price", "16.00", "--inactive", "--user", "v1", "--role", "vendor")
        assert updated.exit_code == 0, updated.output
        assert "Variant P0001-v1 updated" in updated.output

        removed = run("product", "remove-variant", "--id", "P0001", "--variant", "P0001-v1",
                      "--user", "v1", "--role", "vendor")
        assert "Variant P0001-v1 removed (0 left)" in removed.output
        again = run("product", "remove-variant", "--id", "P0001", "--variant", "P0001-v1",
                    "--user", "v1", "--role", "vendor")
        assert again.exit_code == 1


class TestOrderCommands:
    def _create(self, run, qty="2", items_price="25.00", total="25.00"):
        return run("order", "create", "--items", f"P0001:{qty}", *ADDRESS,
                   "--items-price", items_price, "--total", total, "--user", "alice")

    def test_create_show_and_cancel(self, run):
        _add_mug(run)

        created = self._create(run)
        assert created.exit_code == 0, created.output
        assert "Order #1 created" in created.output

        shown = run("order", "show", "--id", "1", "--user", "alice")
        assert "status=pending" in shown.output

        cancelled = run("order", "status", "--id", "1", "--to", "cancelled", "--reason", "Changed mind",
                        "--user", "v1", "--role", "vendor")
        assert cancelled.exit_code == 0, cancelled.output
        assert "is now cancelled" in cancelled.output
        assert "Stock:   10" in run("product", "show", "--id", "P0001").output

    def test_insufficient_stock(self, run):
        _add_mug(run, stock="1")
        result = self._create(run)
        assert result.exit_code == 1
        assert "Insufficient stock" in result.output

    def test_bad_item_format(self, run):
        result = run("order", "create", "--items", "P0001", *ADDRESS,
                     "--items-price", "1", "--total", "1", "--user", "alice")
        assert result.exit_code == 2
        assert "Invalid item format" in result.output

    def test_pay_and_confirm(self, run):
        _add_mug(run)
        self._create(run)

        intent = run("order", "pay", "--id", "1", "--user", "alice")
        assert intent.exit_code == 0, intent.output
        assert "2500 usd" in intent.output

        denied = run("order", "confirm-payment", "--id", "1", "--reference", "pi_1", "--user", "alice")
        assert denied.exit_code == 1

        confirmed = run("order", "confirm-payment", "--id", "1", "--reference", "pi_1",
                        "--user", "root", "--role", "admin")
        assert "marked as paid" in confirmed.output
        again = run("order", "confirm-payment", "--id", "1", "--reference", "pi_1",
                    "--user", "root", "--role", "admin")
        assert "already paid" in again.output

    def test_list(self, run):
        _add_mug(run)
        self._create(run)
        result = run("order", "list", "--user", "alice")
        assert "(1 orders)" in result.output
        assert "No orders found." in run("order", "list", "--user", "bob").output


class TestCouponAndReviewCommands:
    def test_coupon_create_and_check(self, run):
        created = run("coupon", "create", "--code", "save10", "--type", "percentage", "--value", "10",
                      "--starts", "2020-01-01", "--ends", "2099-01-01", "--user", "root", "--role", "admin")
        assert created.exit_code == 0, created.output
        assert "Coupon SAVE10 created" in created.output

        checked = run("coupon", "check", "--code", "SAVE10", "--total", "50", "--user", "alice")
        assert "-$5.00, new total $45.00" in checked.output

    def test_review_after_paid_order(self, run):
        _add_mug(run)
        run("order", "create", "--items", "P0001:1", *ADDRESS,
            "--items-price", "12.50", "--total", "12.50", "--user", "alice")

        refused = run("review", "add", "--product", "P0001", "--rating", "5", "--user", "alice")
        assert refused.exit_code == 1
        assert "purchased" in refused.output

        run("order", "confirm-payment", "--id", "1", "--reference", "pi_1", "--user", "root", "--role", "admin")
        added = run("review", "add", "--product", "P0001", "--rating", "4", "--user", "alice")
        assert added.exit_code == 0, added.output
        assert "Rating:  4.0 (1 reviews)" in run("product", "show", "--id", "P0001").output

        removed = run("review", "remove", "--id", "1", "--user", "alice")
        assert "Review #1 removed" in removed.output

    def test_coupon_list_update_and_delete(self, run):
        admin = ("--user", "root", "--role", "admin")
        run("coupon", "create", "--code", "save10", "--type", "percentage", "--value", "10",
            "--starts", "2020-01-01", "--ends", "2099-01-01", *admin)

        listed = run("coupon", "list", *admin)
        assert listed.exit_code == 0, listed.output
        assert "SAVE10" in listed.output

        updated = run("coupon", "update", "--code", "save10", "--inactive", *admin)
        assert "Coupon SAVE10 updated (inactive)" in updated.output
        assert "No coupons found." in run("coupon", "list", "--available", *admin).output

        denied = run("coupon", "delete", "--code", "SAVE10", "--user", "alice")
        assert denied.exit_code == 1
        assert "Coupon SAVE10 deleted" in run("coupon", "delete", "--code", "SAVE10", *admin).output
        assert "No coupons found." in run("coupon", "list", *admin).output

    def test_review_list(self, run):
        _add_mug(run)
        run("order", "create", "--items", "P0001:1", *ADDRESS,
            "--items-price", "12.50", "--total", "12.50", "--user", "alice")
        run("order", "confirm-payment", "--id", "1", "--reference", "pi_1", "--user", "root", "--role", "admin")
        run("review", "add", "--product", "P0001", "--rating", "4", "--comment", "Sturdy", "--user", "alice")

        listed = run("review", "list", "--product", "P0001")
        assert listed.exit_code == 0, listed.output
        assert "alice (verified)  Sturdy" in listed.output
        assert "Page 1/1 (1 reviews)" in listed.output
        assert run("review", "list", "--product", "P9999").exit_code == 1
