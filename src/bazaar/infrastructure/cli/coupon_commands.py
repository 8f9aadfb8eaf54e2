"""CLI commands for the Coupon aggregate."""

from __future__ import annotations

from datetime import datetime

import click

from bazaar.application.create_coupon import CreateCouponHandler
from bazaar.application.delete_coupon import DeleteCouponHandler
from bazaar.application.show_coupon import ShowCouponHandler
from bazaar.application.update_coupon import UpdateCouponHandler
from bazaar.application.validate_coupon import ValidateCouponHandler
from bazaar.domain.exceptions import DomainException
from bazaar.domain.model.value_objects import Actor
from bazaar.infrastructure.bootstrap import build_container
from bazaar.infrastructure.cli.options import actor_options


@click.command("create")
@click.option("--code", required=True, help="Coupon code (stored uppercase).")
@click.option("--type", "discount_type", required=True, type=click.Choice(["percentage", "fixed"]))
@click.option("--value", "discount_value", required=True, help="Percent (0-100) or fixed amount.")
@click.option("--starts", "start_date", required=True, type=click.DateTime(), help="Valid from (UTC).")
@click.option("--ends", "end_date", required=True, type=click.DateTime(), help="Valid until (UTC).")
@click.option("--description", default="")
@click.option("--max-discount", "max_discount_amount", default=None, help="Cap for percentage coupons.")
@click.option("--min-purchase", "min_purchase_amount", default="0", show_default=True)
@click.option("--usage-limit", default=None, type=int, help="Total redemptions allowed.")
@click.option("--per-user-limit", default=1, type=int, show_default=True)
@actor_options
def coupon_create(actor: Actor, code: str, discount_type: str, discount_value: str,
                  start_date: datetime, end_date: datetime, description: str,
                  max_discount_amount: str | None, min_purchase_amount: str,
                  usage_limit: int | None, per_user_limit: int) -> None:
    """Create a coupon (admin only)."""
    handler = CreateCouponHandler(coupon_repo=build_container().coupons)

    try:
        dto = handler.handle(
            actor,
            code=code,
            discount_type=discount_type,
            discount_value=discount_value,
            start_date=start_date,
            end_date=end_date,
            description=description,
            max_discount_amount=max_discount_amount,
            min_purchase_amount=min_purchase_amount,
            usage_limit=usage_limit,
            per_user_limit=per_user_limit,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Coupon {dto.code} created ({dto.discount_type} {dto.discount_value})")


@click.command("check")
@click.option("--code", required=True, help="Coupon code.")
@click.option("--total", "order_total", required=True, help="Order subtotal to apply it to.")
@actor_options
def coupon_check(actor: Actor, code: str, order_total: str) -> None:
    """Check a coupon against an order subtotal."""
    handler = ValidateCouponHandler(coupon_repo=build_container().coupons)

    try:
        quote = handler.handle(actor, code, order_total)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Coupon {quote.code} is valid: -${quote.discount_amount}, new total ${quote.final_total}")


@click.command("list")
@click.option("--active/--inactive", "is_active", default=None, help="Filter by active flag.")
@click.option("--available", is_flag=True, help="Only coupons redeemable right now.")
@actor_options
def coupon_list(actor: Actor, is_active: bool | None, available: bool) -> None:
    """List coupons with their usage (admin only)."""
    handler = ShowCouponHandler(coupon_repo=build_container().coupons)

    try:
        coupons = handler.list_active() if available else handler.list_all(actor, is_active=is_active)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not coupons:
        click.echo("No coupons found.")
        return

    click.echo(f"{'Code':<14} {'Type':<11} {'Value':>8} {'Used':>10} {'Active':<7} {'Ends'}")
    click.echo("-" * 75)
    for c in coupons:
        used = f"{c.used_count}/{c.usage_limit}" if c.usage_limit is not None else str(c.used_count)
        click.echo(f"{c.code:<14} {c.discount_type:<11} {c.discount_value:>8} {used:>10} "
                   f"{'yes' if c.is_active else 'no':<7} {c.end_date}")


@click.command("update")
@click.option("--code", required=True, help="Coupon code.")
@click.option("--value", "discount_value", default=None, help="New percent or fixed amount.")
@click.option("--description", default=None)
@click.option("--max-discount", "max_discount_amount", default=None)
@click.option("--min-purchase", "min_purchase_amount", default=None)
@click.option("--starts", "start_date", default=None, type=click.DateTime())
@click.option("--ends", "end_date", default=None, type=click.DateTime())
@click.option("--usage-limit", default=None, type=int)
@click.option("--per-user-limit", default=None, type=int)
@click.option("--active/--inactive", "is_active", default=None, help="Switch the coupon on or off.")
@actor_options
def coupon_update(actor: Actor, code: str, discount_value: str | None, description: str | None,
                  max_discount_amount: str | None, min_purchase_amount: str | None,
                  start_date: datetime | None, end_date: datetime | None,
                  usage_limit: int | None, per_user_limit: int | None,
                  is_active: bool | None) -> None:
    """Change a coupon's terms (admin only)."""
    handler = UpdateCouponHandler(coupon_repo=build_container().coupons)

    try:
        dto = handler.handle(
            actor,
            code,
            description=description,
            discount_value=discount_value,
            max_discount_amount=max_discount_amount,
            min_purchase_amount=min_purchase_amount,
            start_date=start_date,
            end_date=end_date,
            usage_limit=usage_limit,
            per_user_limit=per_user_limit,
            is_active=is_active,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Coupon {dto.code} updated" + ("" if dto.is_active else " (inactive)"))


@click.command("delete")
@click.option("--code", required=True, help="Coupon code.")
@actor_options
def coupon_delete(actor: Actor, code: str) -> None:
    """Delete a coupon (admin only)."""
    handler = DeleteCouponHandler(coupon_repo=build_container().coupons)

    try:
        handler.handle(actor, code)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Coupon {code.upper()} deleted")
