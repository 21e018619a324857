from __future__ import annotations

import random
from decimal import Decimal

from django.core.management.base import BaseCommand

from modules.orders.constants import OrderStatus
from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO
from modules.orders.exceptions import InsufficientStock
from modules.orders.repositories import OrderDjangoRepository
from modules.orders.services import OrderLedger
from modules.orders.state_machine import OrderStatusMachine
from modules.products.dtos import CreateProductDTO
from modules.products.models import Product
from modules.products.repositories import ProductDjangoRepository
from modules.products.services import ProductCatalog
from modules.users.dtos import CreateUserDTO
from modules.users.models import User, UserRole
from modules.users.repositories import UserDjangoRepository
from modules.users.services import UserService

PRODUCT_TEMPLATES = [
    ('MacBook Pro 16"', "Powerful laptop for professionals", "2499.99", "electronics"),
    ("iPhone 15 Pro", "Latest smartphone with amazing camera", "1199.99", "electronics"),
    ("AirPods Pro", "Premium wireless earbuds", "249.99", "electronics"),
    ("iPad Air", "Versatile tablet for work and play", "799.99", "electronics"),
    ("Apple Watch Series 9", "Advanced health and fitness tracker", "429.99", "electronics"),
    ("Classic Polo Shirt", "Comfortable cotton polo shirt", "49.99", "clothing"),
    ("Slim Fit Jeans", "Modern slim fit denim jeans", "79.99", "clothing"),
    ("Running Sneakers", "Lightweight athletic shoes", "129.99", "clothing"),
    ("Winter Jacket", "Warm and stylish winter coat", "199.99", "clothing"),
    ("Cotton T-Shirt Pack", "Set of 3 basic t-shirts", "39.99", "clothing"),
    ("The Great Gatsby", "Classic novel by F. Scott Fitzgerald", "14.99", "books"),
    ("Clean Code", "A handbook of agile software craftsmanship", "44.99", "books"),
    ("Atomic Habits", "Build good habits, break bad ones", "24.99", "books"),
    ("The Psychology of Money", "Timeless lessons on wealth", "19.99", "books"),
    ("Design Patterns", "Elements of reusable object-oriented software", "54.99", "books"),
    ("Smart LED Bulbs", "Color-changing smart bulbs (4-pack)", "59.99", "home"),
    ("Ergonomic Office Chair", "Comfortable chair for long work sessions", "349.99", "home"),
    ("Indoor Plant Set", "Collection of easy-care houseplants", "79.99", "home"),
    ("Coffee Maker", "Programmable drip coffee machine", "89.99", "home"),
    ("Robot Vacuum", "Smart cleaning robot with mapping", "449.99", "home"),
]

USER_TEMPLATES = [
    ("John Doe", "john@example.com"),
    ("Jane Smith", "jane@example.com"),
    ("Bob Wilson", "bob@example.com"),
    ("Alice Brown", "alice@example.com"),
    ("Charlie Davis", "charlie@example.com"),
    ("Test User", "test@example.com"),
    ("Demo User", "demo@example.com"),
]

ADDRESSES = [
    "123 Main St, New York, NY 10001",
    "456 Oak Ave, Los Angeles, CA 90001",
    "789 Pine Rd, Chicago, IL 60601",
    "321 Elm Blvd, Houston, TX 77001",
]

# Statuses a seeded order is walked to after creation.
TARGET_STATUSES = [
    OrderStatus.PENDING,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
]


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    def add_arguments(self, parser):
        parser.add_argument("--users", type=int, default=5)
        parser.add_argument("--products", type=int, default=20)
        parser.add_argument("--orders", type=int, default=10)

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        users = self._seed_users(options["users"])
        products = self._seed_products(options["products"])
        orders_created = self._seed_orders(users, products, options["orders"])

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={len(users)}, "
                f"products={len(products)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_users(self, count: int) -> list[User]:
        self.stdout.write("Creating users...")
        service = UserService(UserDjangoRepository())
        users: list[User] = []
        for i in range(count):
            if i < len(USER_TEMPLATES):
                name, email = USER_TEMPLATES[i]
            else:
                name, email = f"User {i}", f"user{i}@example.com"

            existing = User.objects.filter(email=email).first()
            if existing:
                users.append(existing)
                continue
            users.append(
                service.create_user(
                    CreateUserDTO(
                        email=email,
                        name=name,
                        password="password123",
                        role=UserRole.ADMIN if i == 0 else UserRole.USER,
                    )
                )
            )
        self.stdout.write(self.style.SUCCESS("Creating users... Done!"))
        return users

    def _seed_products(self, count: int) -> list[Product]:
        self.stdout.write("Creating products...")
        catalog = ProductCatalog(ProductDjangoRepository())
        products: list[Product] = []
        for i in range(count):
            name, description, price, category = PRODUCT_TEMPLATES[
                i % len(PRODUCT_TEMPLATES)
            ]
            if i >= len(PRODUCT_TEMPLATES):
                name = f"{name} v{i // len(PRODUCT_TEMPLATES) + 1}"
            # +/-10% around the template price
            variation = Decimal(random.randint(90, 110)) / 100
            products.append(
                catalog.create_product(
                    CreateProductDTO(
                        name=name,
                        description=description,
                        price=(Decimal(price) * variation).quantize(Decimal("0.01")),
                        stock=random.randint(10, 59),
                        category=category,
                    )
                )
            )
        self.stdout.write(self.style.SUCCESS("Creating products... Done!"))
        return products

    def _seed_orders(
        self, users: list[User], products: list[Product], count: int
    ) -> int:
        self.stdout.write("Creating orders...")
        if not users or not products:
            self.stdout.write(self.style.WARNING("Skipping orders (no users/products)."))
            return 0

        orders = OrderDjangoRepository()
        product_repo = ProductDjangoRepository()
        ledger = OrderLedger(orders, UserDjangoRepository(), product_repo)
        machine = OrderStatusMachine(orders, product_repo)

        created = 0
        for i in range(count):
            picked = random.sample(products, k=min(random.randint(1, 4), len(products)))
            dto = CreateOrderDTO(
                user_id=str(users[i % len(users)].id),
                items=[
                    CreateOrderItemDTO(
                        product_id=str(product.id), quantity=random.randint(1, 3)
                    )
                    for product in picked
                ],
                shipping_address=random.choice(ADDRESSES),
            )
            try:
                order = ledger.create_order(dto)
            except InsufficientStock as exc:
                self.stdout.write(self.style.WARNING(f"Skipped order: {exc.message}"))
                continue

            target = random.choice(TARGET_STATUSES)
            for status in TARGET_STATUSES[1 : TARGET_STATUSES.index(target) + 1]:
                order = machine.transition(str(order.id), status)
            created += 1

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return created
