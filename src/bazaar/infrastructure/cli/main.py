import click
import uvicorn

from bazaar.infrastructure.api.app import create_app
from bazaar.infrastructure.bootstrap import build_container
from bazaar.infrastructure.cli.coupon_commands import (
    coupon_check,
    coupon_create,
    coupon_delete,
    coupon_list,
    coupon_update,
)
from bazaar.infrastructure.cli.order_commands import (
    order_confirm_payment,
    order_create,
    order_list,
    order_pay,
    order_show,
    order_status,
)
from bazaar.infrastructure.cli.product_commands import (
    product_add,
    product_add_variant,
    product_list,
    product_low_stock,
    product_remove_variant,
    product_set_stock,
    product_show,
    product_update,
    product_update_variant,
)
from bazaar.infrastructure.cli.review_commands import (
    review_add,
    review_edit,
    review_list,
    review_remove,
)
from bazaar.infrastructure.logging import configure_logging
from bazaar.infrastructure.settings import Settings


@click.group()
def cli() -> None:
    """Bazaar: multi-vendor order engine"""
    configure_logging(Settings.from_env())


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def product() -> None:
    """Manage products."""


@cli.group()
def coupon() -> None:
    """Manage coupons."""


@cli.group()
def review() -> None:
    """Manage reviews."""


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, type=int, show_default=True)
def serve(host: str, port: int) -> None:
    """Run the HTTP API."""
    app = create_app(build_container())
    uvicorn.run(app, host=host, port=port, log_config=None)


# Register subcommands
order.add_command(order_confirm_payment)
order.add_command(order_create)
order.add_command(order_list)
order.add_command(order_pay)
order.add_command(order_show)
order.add_command(order_status)
product.add_command(product_add)
product.add_command(product_add_variant)
product.add_command(product_list)
product.add_command(product_low_stock)
product.add_command(product_remove_variant)
product.add_command(product_set_stock)
product.add_command(product_show)
product.add_command(product_update)
product.add_command(product_update_variant)
coupon.add_command(coupon_check)
coupon.add_command(coupon_create)
coupon.add_command(coupon_delete)
coupon.add_command(coupon_list)
coupon.add_command(coupon_update)
review.add_command(review_add)
review.add_command(review_edit)
review.add_command(review_list)
review.add_command(review_remove)
