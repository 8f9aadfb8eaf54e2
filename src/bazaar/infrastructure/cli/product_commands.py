"""CLI commands for the Product aggregate."""

from __future__ import annotations

import click

from bazaar.application.add_product import AddProductHandler
from bazaar.application.add_variant import AddVariantHandler
from bazaar.application.dto import ProductDTO
from bazaar.application.list_products import ListProductsHandler
from bazaar.application.remove_variant import RemoveVariantHandler
from bazaar.application.set_stock import SetStockHandler
from bazaar.application.show_product import ShowProductHandler
from bazaar.application.update_product import UpdateProductHandler
from bazaar.application.update_variant import UpdateVariantHandler
from bazaar.domain.exceptions import DomainException
from bazaar.domain.model.value_objects import Actor
from bazaar.infrastructure.bootstrap import build_container
from bazaar.infrastructure.cli.options import actor_options


def _display_product(dto: ProductDTO) -> None:
    click.echo(f"Product {dto.id}  '{dto.name}'  vendor={dto.vendor_id}")
    click.echo(f"Price:   ${dto.price}" + (f"  (was ${dto.compare_at_price}, -{dto.discount_percentage}%)" if dto.discount_percentage else ""))
    click.echo(f"Stock:   {dto.total_stock}" + ("  LOW" if dto.is_low_stock else "") + ("  OUT" if dto.is_out_of_stock else ""))
    click.echo(f"Sales:   {dto.sales}")
    click.echo(f"Rating:  {dto.rating_average} ({dto.rating_count} reviews)")
    if dto.variants:
        click.echo()
        click.echo(f"  {'Variant':<14} {'Name':<20} {'SKU':<14} {'Price':>10} {'Stock':>6}")
        click.echo(f"  {'-'*68}")
        for v in dto.variants:
            click.echo(f"  {v.id:<14} {v.name:<20} {v.sku or '-':<14} {v.price:>10} {v.stock:>6}")


@click.command("add")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Price (e.g. 15.00).")
@click.option("--stock", default=0, type=int, help="Initial stock.")
@click.option("--compare-at", "compare_at_price", default=None, help="Reference price for discounts.")
@click.option("--low-stock", "low_stock_threshold", default=10, type=int, help="Low stock threshold.")
@click.option("--vendor", "vendor_id", default=None, help="Owning vendor (admins only).")
@actor_options
def product_add(actor: Actor, name: str, price: str, stock: int, compare_at_price: str | None,
                low_stock_threshold: int, vendor_id: str | None) -> None:
    """Add a new product to the catalog."""
    container = build_container()
    handler = AddProductHandler(container.products, container.side_effects)

    try:
        dto = handler.handle(
            actor,
            name=name,
            price=price,
            stock=stock,
            compare_at_price=compare_at_price,
            low_stock_threshold=low_stock_threshold,
            vendor_id=vendor_id,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product {dto.id} '{dto.name}' added at ${dto.price}")


@click.command("add-variant")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--name", required=True, help="Variant name.")
@click.option("--price", required=True, help="Variant price.")
@click.option("--stock", default=0, type=int, help="Initial stock.")
@click.option("--sku", default=None, help="Catalog-wide unique SKU.")
@click.option("--size", default=None)
@click.option("--color", default=None)
@click.option("--material", default=None)
@actor_options
def product_add_variant(actor: Actor, product_id: str, name: str, price: str, stock: int,
                        sku: str | None, size: str | None, color: str | None,
                        material: str | None) -> None:
    """Add a variant to an existing product."""
    container = build_container()
    handler = AddVariantHandler(container.products, container.side_effects)

    try:
        dto = handler.handle(
            actor, product_id, name=name, price=price, stock=stock,
            sku=sku, size=size, color=color, material=material,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Variant {dto.variants[-1].id} added to product {dto.id}")


@click.command("list")
def product_list() -> None:
    """List all products in the catalog."""
    products = ShowProductHandler(build_container().products).list_all()

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<8} {'Name':<20} {'Price':>10} {'Stock':>6} {'Rating':>7}")
    click.echo("-" * 55)
    for p in products:
        click.echo(f"{p.id:<8} {p.name:<20} {p.price:>10} {p.total_stock:>6} {p.rating_average:>7}")


@click.command("show")
@click.option("--id", "product_id", required=True, help="Product ID.")
def product_show(product_id: str) -> None:
    """Show details of a product."""
    try:
        dto = ShowProductHandler(build_container().products).handle(product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_product(dto)


@click.command("update")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--price", default=None, help="New price (e.g. 29.99).")
@click.option("--active/--inactive", "is_active", default=None, help="List or delist the product.")
@actor_options
def product_update(actor: Actor, product_id: str, price: str | None, is_active: bool | None) -> None:
    """Update a product's price or listing."""
    container = build_container()
    handler = UpdateProductHandler(container.products, container.side_effects)

    try:
        handler.handle(actor, product_id=product_id, new_price=price, is_active=is_active)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product {product_id} updated")


@click.command("set-stock")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--quantity", required=True, type=int, help="New stock level.")
@click.option("--variant", "variant_id", default=None, help="Variant ID, for products with variants.")
@actor_options
def product_set_stock(actor: Actor, product_id: str, quantity: int, variant_id: str | None) -> None:
    """Set the stock level of a product or one of its variants."""
    container = build_container()
    handler = SetStockHandler(container.products, container.side_effects)

    try:
        dto = handler.handle(actor, product_id, quantity, variant_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    where = f"variant {variant_id}" if variant_id else f"product {product_id}"
    click.echo(f"Stock for {where} set to {quantity} (total {dto.total_stock})")


@click.command("low-stock")
@actor_options
def product_low_stock(actor: Actor) -> None:
    """List active products at or under their low stock threshold."""
    try:
        products = ListProductsHandler(build_container().products).low_stock(actor)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not products:
        click.echo("No products are low on stock.")
        return

    click.echo(f"{'ID':<8} {'Name':<20} {'Stock':>6} {'Vendor'}")
    click.echo("-" * 50)
    for p in products:
        click.echo(f"{p.id:<8} {p.name:<20} {p.total_stock:>6} {p.vendor_id}")


@click.command("update-variant")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--variant", "variant_id", required=True, help="Variant ID.")
@click.option("--name", default=None)
@click.option("--price", default=None)
@click.option("--sku", default=None)
@click.option("--size", default=None)
@click.option("--color", default=None)
@click.option("--material", default=None)
@click.option("--active/--inactive", "is_active", default=None, help="Offer or withdraw the variant.")
@actor_options
def product_update_variant(actor: Actor, product_id: str, variant_id: str, name: str | None,
                           price: str | None, sku: str | None, size: str | None,
                           color: str | None, material: str | None,
                           is_active: bool | None) -> None:
    """Change a variant's details, price or availability."""
    container = build_container()
    handler = UpdateVariantHandler(container.products, container.side_effects)

    try:
        handler.handle(
            actor, product_id, variant_id, name=name, price=price, sku=sku,
            size=size, color=color, material=material, is_active=is_active,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Variant {variant_id} updated")


@click.command("remove-variant")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--variant", "variant_id", required=True, help="Variant ID.")
@actor_options
def product_remove_variant(actor: Actor, product_id: str, variant_id: str) -> None:
    """Delete a variant from a product."""
    container = build_container()
    handler = RemoveVariantHandler(container.products, container.side_effects)

    try:
        dto = handler.handle(actor, product_id, variant_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Variant {variant_id} removed ({len(dto.variants)} left)")
