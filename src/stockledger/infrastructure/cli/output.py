"""Shared formatting for command output."""

from __future__ import annotations

import click

from stockledger.application.dto import DeductionResultDTO, MovementDTO


def echo_result(dto: DeductionResultDTO) -> None:
    click.echo(f"Deducted: {dto.deducted}  Skipped: {dto.skipped}  Errors: {len(dto.errors)}")
    for error in dto.errors:
        click.echo(f"  ! {error}")


def echo_movement(dto: MovementDTO) -> None:
    reference = f" ({dto.reference})" if dto.reference else ""
    click.echo(
        f"Movement #{dto.id}: {dto.type} {dto.quantity:+d} for product "
        f"{dto.product_id} in warehouse {dto.warehouse_id} "
        f"[{dto.quantity_before} -> {dto.quantity_after}]{reference}"
    )
