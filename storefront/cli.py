from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from rich import print as rprint
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .api_client import ApiClient
from .cart import CartManager
from .checkout import place_order
from .config import Settings, load_settings
from .errors import CheckoutValidationError, StorefrontError
from .pricing import format_money, free_shipping_remaining
from .sample_data import initialize_sample_data, load_catalog
from .schemas import ORDER_STATUSES, Address, Cart, Category, Order, PaymentMethod, Product
from .services import CategoryService, OrderService, ProductService
from .storage import LocalStore

console = Console()


@dataclass
class Context:
    settings: Settings
    store: LocalStore
    products: ProductService
    categories: CategoryService
    orders: OrderService
    cart: CartManager


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def build_context(args: argparse.Namespace) -> Context:
    overrides = {
        "store_path": args.store,
        "api_base_url": args.api_url,
        "log_level": args.log_level,
    }
    if args.offline:
        overrides["offline"] = True
    config = load_settings(**{k: v for k, v in overrides.items() if v is not None})

    store = LocalStore(config.store_path)
    client = ApiClient(store=store, config=config)
    return Context(
        settings=config,
        store=store,
        products=ProductService(client=client, store=store, config=config),
        categories=CategoryService(client=client, store=store, config=config),
        orders=OrderService(client=client, store=store, config=config),
        cart=CartManager(store=store, config=config),
    )


# Rendering
def render_products(products: List[Product], settings: Settings) -> None:
    table = Table(title="Products")
    table.add_column("ID", style="dim")
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Price", justify="right")
    table.add_column("Stock")
    for product in products:
        price = format_money(product.price)
        if product.discount_percent():
            price = f"{price} [green](-{product.discount_percent()}%)[/green]"
        table.add_row(
            product.id,
            product.name,
            product.category,
            price,
            f"{product.stock} ({product.stock_label(settings.low_stock_threshold)})",
        )
    console.print(table)


def render_categories(categories: List[Category]) -> None:
    table = Table(title="Categories")
    table.add_column("ID", style="dim")
    table.add_column("Name")
    table.add_column("Status")
    table.add_column("Products", justify="right")
    for category in categories:
        table.add_row(category.id, category.name, category.status, str(category.product_count))
        for child in category.subcategories:
            table.add_row(child.id, f"  └ {child.name}", child.status, str(child.product_count))
    console.print(table)


def render_cart(cart: Cart, settings: Settings) -> None:
    if not cart.items:
        rprint("[yellow]Your cart is empty.[/yellow]")
        return
    table = Table(title="Cart")
    table.add_column("Item", style="dim")
    table.add_column("Product")
    table.add_column("Options")
    table.add_column("Qty", justify="right")
    table.add_column("Line total", justify="right")
    for item in cart.items:
        options = " / ".join(v for v in (item.color, item.size) if v)
        table.add_row(item.id, item.name, options, str(item.quantity), format_money(item.line_total))
    console.print(table)
    rprint(f"Subtotal: {format_money(cart.subtotal)}")
    rprint(f"Shipping: {'FREE' if cart.shipping == 0 else format_money(cart.shipping)}")
    rprint(f"Tax: {format_money(cart.tax)}")
    rprint(f"[bold]Total: {format_money(cart.total)}[/bold]")
    if cart.shipping > 0:
        remaining = free_shipping_remaining(cart.subtotal, settings)
        rprint(f"[green]Add {format_money(remaining)} more for FREE shipping![/green]")


def render_orders(orders: List[Order]) -> None:
    table = Table(title="Orders")
    table.add_column("ID", style="dim")
    table.add_column("Number")
    table.add_column("Customer")
    table.add_column("Items", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Status")
    table.add_column("Created")
    for order in orders:
        table.add_row(
            order.id,
            order.order_number,
            order.customer_email,
            str(len(order.items)),
            format_money(order.total),
            order.status,
            order.created_at or "",
        )
    console.print(table)


# Commands
def cmd_seed(ctx: Context, args: argparse.Namespace) -> int:
    catalog = load_catalog(args.catalog) if args.catalog else None
    written = initialize_sample_data(ctx.store, catalog)
    if not written:
        rprint("[yellow]Sample data already present; nothing to do.[/yellow]")
    for key, count in written.items():
        rprint(f"[green]✓[/green] {key}: {count} records")
    return 0


def cmd_products(ctx: Context, args: argparse.Namespace) -> int:
    page = ctx.products.list_products(
        category=args.category,
        search=args.search,
        featured=True if args.featured else None,
        in_stock=True if args.in_stock else None,
        sort_by=args.sort,
        sort_order=args.order,
        page=args.page,
        limit=args.limit,
    )
    render_products(page.products, ctx.settings)
    rprint(f"[dim]Page {page.page} of {max(page.total_pages, 1)} · {page.total} products[/dim]")
    return 0


def cmd_categories(ctx: Context, args: argparse.Namespace) -> int:
    categories = ctx.categories.get_category_tree() if args.tree else ctx.categories.list_categories(status=args.status)
    render_categories(categories)
    return 0


def cmd_cart(ctx: Context, args: argparse.Namespace) -> int:
    if args.cart_command == "add":
        product = ctx.products.get_product(args.product_id)
        cart = ctx.cart.add_product(product, quantity=args.quantity, color=args.color, size=args.size)
        rprint(f"[green]Added {args.quantity} × {product.name} to cart.[/green]")
    elif args.cart_command == "update":
        cart = ctx.cart.update_item(args.item_id, args.quantity)
    elif args.cart_command == "remove":
        cart = ctx.cart.remove_item(args.item_id)
    elif args.cart_command == "clear":
        cart = ctx.cart.clear()
        rprint("[green]Cart cleared.[/green]")
    else:
        cart = ctx.cart.load()
    render_cart(cart, ctx.settings)
    return 0


def cmd_checkout(ctx: Context, args: argparse.Namespace) -> int:
    billing = Address(
        first_name=args.first_name,
        last_name=args.last_name,
        email=args.email,
        phone=args.phone,
        address_line1=args.address,
        address_line2=args.address2,
        city=args.city,
        state=args.state,
        postal_code=args.postal_code,
        country=args.country,
    )
    if args.payment == "credit_card":
        payment = PaymentMethod.from_card(
            args.card_number or "",
            cardholder_name=args.cardholder or billing.full_name,
            expiry_month=args.expiry_month or "",
            expiry_year=args.expiry_year or "",
        )
    else:
        payment = PaymentMethod(type=args.payment)

    try:
        order = place_order(
            ctx.cart.load(),
            billing,
            payment,
            ctx.orders,
            notes=args.notes,
            cart_manager=ctx.cart,
        )
    except CheckoutValidationError as exc:
        rprint("[red]Please fix the following fields:[/red]")
        for section, messages in exc.errors.items():
            for field, message in messages.items():
                rprint(f"  [red]{section}.{field}[/red]: {message}")
        return 1

    rprint(f"[bold green]✓ Order placed: {order.order_number}[/bold green]")
    rprint(f"  {len(order.items)} items · total {format_money(order.total)}")
    return 0


def cmd_orders(ctx: Context, args: argparse.Namespace) -> int:
    if args.orders_command == "status":
        order = ctx.orders.update_order_status(args.order_id, args.status)
        rprint(f"[green]Order {order.order_number} is now {order.status}.[/green]")
        return 0
    if args.orders_command == "stats":
        stats = ctx.orders.order_stats()
        table = Table(title="Order statistics")
        table.add_column("Metric")
        table.add_column("Value", justify="right")
        table.add_row("Total orders", str(stats.total_orders))
        table.add_row("Total revenue", format_money(stats.total_revenue))
        table.add_row("Average order value", format_money(stats.average_order_value))
        for status in ORDER_STATUSES:
            table.add_row(status.capitalize(), str(getattr(stats, f"{status}_orders")))
        console.print(table)
        return 0
    render_orders(ctx.orders.list_orders(status=args.status, search=args.search))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="storefront", description="Storefront client with an offline fallback store.")
    parser.add_argument("--store", help="Path to the local fallback store (default: settings.store_path)")
    parser.add_argument("--api-url", help="Base URL of the storefront REST API")
    parser.add_argument("--offline", action="store_true", help="Skip the API and use the local store only")
    parser.add_argument("--log-level", help="Logging level (default: settings.log_level)")
    sub = parser.add_subparsers(dest="command", required=True)

    seed = sub.add_parser("seed", help="Seed the local store with sample data")
    seed.add_argument("--catalog", help="YAML catalog with products and categories")
    seed.set_defaults(handler=cmd_seed)

    products = sub.add_parser("products", help="List products")
    products.add_argument("--category")
    products.add_argument("--search")
    products.add_argument("--featured", action="store_true")
    products.add_argument("--in-stock", action="store_true")
    products.add_argument("--sort", default="name", choices=["name", "price", "rating", "createdAt", "stock"])
    products.add_argument("--order", default="asc", choices=["asc", "desc"])
    products.add_argument("--page", type=int, default=1)
    products.add_argument("--limit", type=int, default=12)
    products.set_defaults(handler=cmd_products)

    categories = sub.add_parser("categories", help="List categories")
    categories.add_argument("--status", choices=["active", "inactive"])
    categories.add_argument("--tree", action="store_true", help="Show subcategories under their parents")
    categories.set_defaults(handler=cmd_categories)

    cart = sub.add_parser("cart", help="Show or change the cart")
    cart_sub = cart.add_subparsers(dest="cart_command")
    cart_sub.add_parser("show")
    cart_add = cart_sub.add_parser("add")
    cart_add.add_argument("product_id")
    cart_add.add_argument("--quantity", type=int, default=1)
    cart_add.add_argument("--color")
    cart_add.add_argument("--size")
    cart_update = cart_sub.add_parser("update")
    cart_update.add_argument("item_id")
    cart_update.add_argument("quantity", type=int)
    cart_remove = cart_sub.add_parser("remove")
    cart_remove.add_argument("item_id")
    cart_sub.add_parser("clear")
    cart.set_defaults(handler=cmd_cart, cart_command="show")

    checkout = sub.add_parser("checkout", help="Place an order from the cart")
    checkout.add_argument("--first-name", default="")
    checkout.add_argument("--last-name", default="")
    checkout.add_argument("--email", default="")
    checkout.add_argument("--phone", default="")
    checkout.add_argument("--address", default="")
    checkout.add_argument("--address2", default="")
    checkout.add_argument("--city", default="")
    checkout.add_argument("--state", default="")
    checkout.add_argument("--postal-code", default="")
    checkout.add_argument("--country", default="US")
    checkout.add_argument("--payment", default="credit_card", choices=["credit_card", "paypal", "cash_on_delivery"])
    checkout.add_argument("--card-number")
    checkout.add_argument("--cardholder")
    checkout.add_argument("--expiry-month")
    checkout.add_argument("--expiry-year")
    checkout.add_argument("--notes", default="")
    checkout.set_defaults(handler=cmd_checkout)

    orders = sub.add_parser("orders", help="List and manage orders")
    orders_sub = orders.add_subparsers(dest="orders_command")
    orders_list = orders_sub.add_parser("list")
    orders_list.add_argument("--status", choices=list(ORDER_STATUSES))
    orders_list.add_argument("--search")
    orders_status = orders_sub.add_parser("status")
    orders_status.add_argument("order_id")
    orders_status.add_argument("status", choices=list(ORDER_STATUSES))
    orders_sub.add_parser("stats")
    orders.set_defaults(handler=cmd_orders, orders_command="list", status=None, search=None)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    ctx = build_context(args)
    configure_logging(ctx.settings.log_level)

    try:
        return args.handler(ctx, args)
    except (StorefrontError, ValueError) as exc:
        rprint(f"[red]Error:[/red] {exc}")
        return 1
