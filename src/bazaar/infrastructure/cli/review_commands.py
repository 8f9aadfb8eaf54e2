"""CLI commands for the Review aggregate."""

from __future__ import annotations

import click

from bazaar.application.edit_review import EditReviewHandler
from bazaar.application.list_reviews import ListReviewsHandler
from bazaar.application.remove_review import RemoveReviewHandler
from bazaar.application.submit_review import SubmitReviewHandler
from bazaar.domain.exceptions import DomainException
from bazaar.domain.model.value_objects import Actor
from bazaar.infrastructure.bootstrap import build_container
from bazaar.infrastructure.cli.options import actor_options


@click.command("add")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--rating", required=True, type=click.IntRange(1, 5))
@click.option("--comment", default="")
@actor_options
def review_add(actor: Actor, product_id: str, rating: int, comment: str) -> None:
    """Review a purchased product."""
    container = build_container()
    handler = SubmitReviewHandler(
        container.reviews, container.products, container.orders, container.side_effects
    )

    try:
        dto = handler.handle(actor, product_id, rating, comment)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Review #{dto.id} added for product {dto.product_id}")


@click.command("edit")
@click.option("--id", "review_id", required=True, type=int, help="Review ID.")
@click.option("--rating", default=None, type=click.IntRange(1, 5))
@click.option("--comment", default=None)
@actor_options
def review_edit(actor: Actor, review_id: int, rating: int | None, comment: str | None) -> None:
    """Edit your review."""
    container = build_container()
    handler = EditReviewHandler(container.reviews, container.products, container.side_effects)

    try:
        handler.handle(actor, review_id, rating=rating, comment=comment)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Review #{review_id} updated")


@click.command("remove")
@click.option("--id", "review_id", required=True, type=int, help="Review ID.")
@actor_options
def review_remove(actor: Actor, review_id: int) -> None:
    """Remove a review (author or admin)."""
    container = build_container()
    handler = RemoveReviewHandler(container.reviews, container.products, container.side_effects)

    try:
        handler.handle(actor, review_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Review #{review_id} removed")


@click.command("list")
@click.option("--product", "product_id", required=True, help="Product ID.")
@click.option("--rating", default=None, type=click.IntRange(1, 5), help="Only this rating.")
@click.option("--page", default=1, type=int, show_default=True)
@click.option("--limit", default=10, type=int, show_default=True)
def review_list(product_id: str, rating: int | None, page: int, limit: int) -> None:
    """List a product's reviews, newest first."""
    container = build_container()
    handler = ListReviewsHandler(container.reviews, container.products)

    try:
        result = handler.handle(product_id, rating=rating, page=page, limit=limit)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not result.reviews:
        click.echo("No reviews found.")
        return

    for r in result.reviews:
        badge = " (verified)" if r.is_verified else ""
        click.echo(f"#{r.id}  {'*' * r.rating:<5}  {r.user_id}{badge}  {r.comment}")
    click.echo(f"Page {result.page}/{result.total_pages} ({result.total} reviews)")
