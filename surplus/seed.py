"""
seed.py – Reset demo data: one restaurant + two listings.

    python -m surplus.seed

Wipes orders, listings and users first. Exits 1 on failure.
"""
import logging
import sys

import bcrypt
from dotenv import load_dotenv

from .config import Settings
from .db.models import Listing, Order, User
from .db.session import Database

logger = logging.getLogger(__name__)

DEMO_EMAIL    = "resto@demo.com"
DEMO_PASSWORD = "demo1234"

DEMO_LISTINGS = [
    {"title": "Veg Meal Box", "description": "Rice & veg",  "price": 30, "quantity_available": 5},
    {"title": "Bread Pack",   "description": "Sandwiches", "price": 20, "quantity_available": 8},
]


def seed(db: Database, rounds: int = 10) -> str:
    """Returns the demo restaurant's id."""
    db.create_all()
    with db.session() as session:
        # orders reference listings and users
        session.query(Order).delete()
        session.query(Listing).delete()
        session.query(User).delete()

        resto = User(
            name="Demo Restaurant",
            email=DEMO_EMAIL,
            password_hash=bcrypt.hashpw(DEMO_PASSWORD.encode(), bcrypt.gensalt(rounds=rounds)).decode(),
            role="restaurant",
        )
        session.add(resto)
        session.flush()
        session.add_all(Listing(restaurant_id=resto.id, **fields) for fields in DEMO_LISTINGS)
        return resto.id


def main() -> int:
    load_dotenv()
    logging.basicConfig(level=logging.INFO)
    settings = Settings.from_env()
    db = Database(settings.database_url)
    try:
        resto_id = seed(db, settings.bcrypt_rounds)
    except Exception:
        logger.exception("Seed failed")
        return 1
    finally:
        db.dispose()
    logger.info(f"Seed complete (restaurant {resto_id}, login {DEMO_EMAIL} / {DEMO_PASSWORD})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
