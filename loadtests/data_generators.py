"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass the order's validation rules
(delivery details, message text, quantities) and match the field names of
the API's Pydantic request schemas.
"""

import random
import uuid
from datetime import date, timedelta

from faker import Faker

fake = Faker()

PORTS = ["Busan", "Rotterdam", "Singapore", "Antwerp", "Houston", "Santos", "Durban"]

PROVISIONS = [
    ("Coffee Beans", 12.0),
    ("Oat Milk", 2.5),
    ("Batteries AA", 6.0),
    ("Instant Noodles", 1.2),
    ("Sunscreen SPF50", 9.8),
    ("Work Gloves", 7.5),
    ("Phone Card", 20.0),
    ("Toothpaste", 3.4),
]


def crew_member() -> tuple[str, str]:
    """Generate a (user_id, email) pair for a simulated buyer."""
    user_id = f"user-lt-{uuid.uuid4().hex[:8]}"
    return user_id, f"{fake.user_name()[:20]}.{uuid.uuid4().hex[:4]}@{fake.free_email_domain()}"


def ship_name() -> str:
    return f"MV {fake.last_name()} {random.choice(['Star', 'Spirit', 'Trader', 'Voyager'])}"


def cart_lines(count: int | None = None) -> list[dict]:
    """Generate SeedCartRequest items with unique product ids."""
    count = count or random.randint(2, 5)
    lines = []
    for name, price in random.sample(PROVISIONS, k=min(count, len(PROVISIONS))):
        lines.append(
            {
                "product_id": f"prod-{uuid.uuid4().hex[:8]}",
                "name": name,
                "quantity": random.randint(1, 6),
                "unit_price": price,
                "discount": random.choice([0.0, 0.0, 5.0, 10.0]),
            }
        )
    return lines


def onboard_delivery() -> dict:
    shipping_date = date.today() + timedelta(days=random.randint(3, 30))
    return {
        "option": "onboard",
        "port_name": random.choice(PORTS),
        "expected_shipping_date": shipping_date.isoformat(),
    }


def alternative_delivery() -> dict:
    return {
        "option": "alternative",
        "address": fake.street_address()[:200],
        "postal_code": fake.postcode()[:20],
    }


def delivery_details() -> dict:
    return onboard_delivery() if random.random() < 0.8 else alternative_delivery()


def buyer_message() -> str:
    return fake.sentence(nb_words=random.randint(4, 12))
