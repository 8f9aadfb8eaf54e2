"""CLI commands for the Order aggregate."""

from __future__ import annotations

import click

from bazaar.application.authorization import require_role
from bazaar.application.confirm_payment import ConfirmPaymentHandler
from bazaar.application.create_order import CreateOrderHandler
from bazaar.application.create_payment_intent import CreatePaymentIntentHandler
from bazaar.application.dto import OrderDTO, OrderItemSpec, PricingSpec
from bazaar.application.list_orders import ListOrdersHandler
from bazaar.application.show_order import ShowOrderHandler
from bazaar.application.update_order_status import UpdateOrderStatusHandler
from bazaar.domain.exceptions import DomainException
from bazaar.domain.model.value_objects import Actor, Address, Role
from bazaar.infrastructure.bootstrap import build_container
from bazaar.infrastructure.cli.options import actor_options


def _parse_items(raw: str) -> list[OrderItemSpec]:
    """Parse 'P0001:3,P0002@P0002-v1:1' into OrderItemSpec list."""
    specs: list[OrderItemSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'ProductId[@VariantId]:Quantity'."
            )
        target, qty_str = pair.rsplit(":", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(
                f"Invalid quantity '{qty_str}' for product '{target}'."
            )
        product_id, _, variant_id = target.partition("@")
        specs.append(OrderItemSpec(product_id.strip(), qty, variant_id.strip() or None))
    return specs


def _display_order(dto: OrderDTO) -> None:
    """Shared formatting for displaying an order."""
    click.echo(f"Order #{dto.id} {dto.order_number}  (status={dto.status})")
    click.echo(f"Customer: {dto.user_id}")
    click.echo(f"Created:  {dto.created_at}")
    click.echo(f"Paid:     {dto.paid_at or 'no'}")
    if dto.cancel_reason:
        click.echo(f"Cancelled: {dto.cancel_reason}")
    click.echo()
    click.echo(f"  {'Product':<24} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*51}")
    for item in dto.items:
        name = f"{item.name} ({item.size or item.sku or item.variant_id})" if item.variant_id else item.name
        click.echo(f"  {name:<24} {item.quantity:>5} {item.unit_price:>10} {item.line_total:>10}")
    click.echo(f"  {'-'*51}")
    click.echo(f"  {'Items':<31} {dto.items_price:>20}")
    click.echo(f"  {'Tax':<31} {dto.tax_price:>20}")
    click.echo(f"  {'Shipping':<31} {dto.shipping_price:>20}")
    if dto.coupon_code:
        click.echo(f"  {'Discount (' + dto.coupon_code + ')':<31} {'-' + dto.discount_amount:>20}")
    click.echo(f"  {'Order Total':<31} {dto.total_price:>20}")


@click.command("create")
@click.option("--items", required=True, help="Items as 'ProductId[@VariantId]:Qty,...'.")
@click.option("--street", required=True)
@click.option("--city", required=True)
@click.option("--state", required=True)
@click.option("--zip", "zip_code", required=True)
@click.option("--country", required=True)
@click.option("--items-price", required=True, help="Sum of line totals.")
@click.option("--tax", "tax_price", default="0", show_default=True)
@click.option("--shipping", "shipping_price", default="0", show_default=True)
@click.option("--total", "total_price", required=True, help="Items + tax + shipping, before discount.")
@click.option("--coupon", "coupon_code", default=None, help="Coupon code to apply.")
@click.option("--require-coupon", is_flag=True, help="Fail instead of dropping a rejected coupon.")
@actor_options
def order_create(actor: Actor, items: str, street: str, city: str, state: str, zip_code: str,
                 country: str, items_price: str, tax_price: str, shipping_price: str,
                 total_price: str, coupon_code: str | None, require_coupon: bool) -> None:
    """Place a new order."""
    specs = _parse_items(items)
    container = build_container()
    handler = CreateOrderHandler(
        order_repo=container.orders,
        product_repo=container.products,
        coupon_repo=container.coupons,
        side_effects=container.side_effects,
    )

    try:
        address = Address(street, city, state, zip_code, country)
        dto = handler.handle(
            actor,
            item_specs=specs,
            shipping_address=address,
            pricing=PricingSpec(items_price, tax_price, shipping_price, total_price),
            coupon_code=coupon_code,
            require_coupon=require_coupon,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id} created  ({dto.order_number}, status={dto.status})")
    _display_order(dto)


@click.command("show")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to display.")
@actor_options
def order_show(actor: Actor, order_id: int) -> None:
    """Show details of an existing order."""
    handler = ShowOrderHandler(order_repo=build_container().orders)

    try:
        dto = handler.handle(actor, order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("list")
@click.option("--status", default=None, help="Only orders in this status.")
@click.option("--page", default=1, type=int)
@click.option("--limit", default=10, type=int)
@actor_options
def order_list(actor: Actor, status: str | None, page: int, limit: int) -> None:
    """List the orders visible to the acting user."""
    handler = ListOrdersHandler(order_repo=build_container().orders)

    try:
        result = handler.handle(actor, status=status, page=page, limit=limit)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not result.orders:
        click.echo("No orders found.")
        return

    click.echo(f"{'ID':<6} {'Number':<16} {'Customer':<12} {'Status':<20} {'Total':>10}")
    click.echo("-" * 68)
    for o in result.orders:
        click.echo(f"{o.id:<6} {o.order_number:<16} {o.user_id:<12} {o.status:<20} {o.total_price:>10}")
    click.echo(f"Page {result.page} of {result.total_pages} ({result.total} orders)")


@click.command("status")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to update.")
@click.option("--to", "new_status", required=True, help="processing, shipped, delivered or cancelled.")
@click.option("--reason", "cancel_reason", default=None, help="Required when cancelling.")
@actor_options
def order_status(actor: Actor, order_id: int, new_status: str, cancel_reason: str | None) -> None:
    """Move an order along its lifecycle, or cancel it (restocks items)."""
    container = build_container()
    handler = UpdateOrderStatusHandler(
        order_repo=container.orders,
        product_repo=container.products,
        side_effects=container.side_effects,
    )

    try:
        dto = handler.handle(actor, order_id, new_status, cancel_reason)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order #{dto.id} is now {dto.status}.")


@click.command("pay")
@click.option("--id", "order_id", required=True, type=int, help="Order ID to pay.")
@actor_options
def order_pay(actor: Actor, order_id: int) -> None:
    """Open a payment intent for an order."""
    container = build_container()
    handler = CreatePaymentIntentHandler(container.orders, container.gateway)

    try:
        intent = handler.handle(actor, order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Payment intent {intent.payment_intent_id} for {intent.amount} {intent.currency}")
    click.echo(f"Client secret: {intent.client_secret}")


@click.command("confirm-payment")
@click.option("--id", "order_id", required=True, type=int, help="Order ID.")
@click.option("--reference", required=True, help="Provider payment reference.")
@actor_options
def order_confirm_payment(actor: Actor, order_id: int, reference: str) -> None:
    """Record a provider-confirmed payment by hand (admin only)."""
    container = build_container()
    handler = ConfirmPaymentHandler(container.orders, container.side_effects)

    try:
        require_role(actor, Role.ADMIN)
        changed = handler.handle(order_id, reference)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if changed:
        click.echo(f"Order #{order_id} marked as paid.")
    else:
        click.echo(f"Order #{order_id} was already paid.")
