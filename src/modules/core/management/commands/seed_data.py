from __future__ import annotations

import random
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from modules.products.models import Product
from modules.reviews.models import Review


class Command(BaseCommand):
    help = "Seed database with demo users, products and reviews."

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        users = self._seed_users()
        products = self._seed_products()
        reviews_created = self._seed_reviews(users, products)

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"users={len(users)}, "
                f"products={len(products)}, "
                f"reviews={reviews_created}"
            )
        )

    def _seed_users(self) -> list:
        User = get_user_model()
        seed_users = [
            ("admin", "admin@example.com", "admin123", True),
            ("hanako", "hanako@example.com", "hanako123", False),
            ("taro", "taro@example.com", "taro123", False),
        ]
        users = []
        for username, email, password, is_staff in seed_users:
            user = User.objects.filter(username=username).first()
            if user is None:
                if is_staff:
                    user = User.objects.create_superuser(
                        username, email=email, password=password
                    )
                else:
                    user = User.objects.create_user(
                        username, email=email, password=password
                    )
            users.append(user)
        return users

    def _seed_products(self) -> list[Product]:
        self.stdout.write("Creating products...")
        products: list[Product] = []
        catalog = [
            ("Ceramic Mug", "Hand-glazed stoneware, 350 ml.", Decimal("1800"), True),
            ("Linen Tea Towel", "Natural linen, set of two.", Decimal("1200"), False),
            ("Cast Iron Teapot", "Tetsubin, 0.8 l.", Decimal("6800"), True),
            ("Bamboo Chopsticks", "Five pairs, lacquered.", Decimal("900"), False),
            ("Hinoki Cutting Board", "Cypress wood, 30 x 20 cm.", Decimal("4500"), True),
            ("Donabe Pot", "Clay pot for rice and stews.", Decimal("7200"), False),
            ("Glass Carafe", "Heat-resistant, 1 l.", Decimal("2600"), True),
            ("Indigo Apron", "Cotton, hand-dyed.", Decimal("3900"), False),
            ("Matcha Whisk", "Chasen, 100 prongs.", Decimal("2200"), True),
            ("Sake Set", "Tokkuri with four cups.", Decimal("5400"), False),
        ]
        for name, description, price, is_featured in catalog:
            product, _ = Product.objects.get_or_create(
                name=name,
                defaults={
                    "description": description,
                    "price": price,
                    "stock": random.randint(5, 60),
                    "sales_count": random.randint(0, 40),
                    "is_featured": is_featured,
                },
            )
            products.append(product)
        self.stdout.write(self.style.SUCCESS("Creating products... Done!"))
        return products

    def _seed_reviews(self, users: list, products: list[Product]) -> int:
        self.stdout.write("Creating reviews...")
        shoppers = [u for u in users if not u.is_staff]
        created = 0
        for product in products:
            if Review.objects.filter(product=product).exists():
                continue
            for user in random.sample(shoppers, k=random.randint(0, len(shoppers))):
                Review.objects.create(
                    product=product,
                    user=user,
                    rating=random.randint(3, 5),
                    content=f"Happy with the {product.name.lower()}.",
                )
                created += 1
        self.stdout.write(self.style.SUCCESS("Creating reviews... Done!"))
        return created
