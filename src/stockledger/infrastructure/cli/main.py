import click

from stockledger.infrastructure.cli.order_commands import order_deduct
from stockledger.infrastructure.cli.product_commands import (
    package_add,
    product_add,
    product_list,
)
from stockledger.infrastructure.cli.shipment_commands import (
    shipment_cancel,
    shipment_commit,
    shipment_reserve,
    shipment_ship_item,
)
from stockledger.infrastructure.cli.stock_commands import (
    stock_adjust,
    stock_audit,
    stock_history,
    stock_receive,
    stock_show,
)
from stockledger.infrastructure.config import get_settings
from stockledger.infrastructure.logging_config import setup_logging


@click.group()
def cli() -> None:
    """Stock ledger and fulfillment deduction"""
    setup_logging(get_settings().LOG_LEVEL)


@cli.group()
def product() -> None:
    """Manage products."""


@cli.group()
def package() -> None:
    """Manage packages."""


@cli.group()
def stock() -> None:
    """Stock levels, receipts, adjustments and audit."""


@cli.group()
def order() -> None:
    """Deduct stock for orders."""


@cli.group()
def shipment() -> None:
    """Reserve, ship and cancel shipment batches."""


# Register subcommands
product.add_command(product_add)
product.add_command(product_list)
package.add_command(package_add)
stock.add_command(stock_adjust)
stock.add_command(stock_audit)
stock.add_command(stock_history)
stock.add_command(stock_receive)
stock.add_command(stock_show)
order.add_command(order_deduct)
shipment.add_command(shipment_cancel)
shipment.add_command(shipment_commit)
shipment.add_command(shipment_reserve)
shipment.add_command(shipment_ship_item)
