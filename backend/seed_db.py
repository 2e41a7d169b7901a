import os
import random
import sys

# Add 'backend' folder to Python path
sys.path.append(os.path.abspath(os.path.dirname(__file__)))

from dotenv import load_dotenv

load_dotenv()

from database import SessionLocal, init_db
from models.category import Category
from models.product import Product
from models.users import User, Role
from utils.hashing import get_password_hash

# Configuration
ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@shopsmart.local")
ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "admin123")

CATALOG = {
    "Vegetables": ["Tomatoes 1kg", "Potatoes 2kg", "Carrots 1kg", "Spinach Bunch", "Red Onions 1kg"],
    "Fruits": ["Bananas 1 Dozen", "Apples 1kg", "Seedless Grapes 500g", "Alphonso Mangoes 1kg"],
    "Dairy Eggs": ["Full Cream Milk 1L", "Farm Eggs 12pcs", "Paneer 200g", "Greek Yogurt 400g"],
    "Rice": ["Basmati Rice 5kg", "Sona Masoori Rice 5kg", "Brown Rice 1kg"],
    "Snacks": ["Salted Peanuts 200g", "Potato Chips 150g", "Digestive Biscuits 250g"],
}
# End Configuration


def seed():
    """Creates an admin account, grocery categories and products. Safe to re-run."""
    init_db()
    session = SessionLocal()
    try:
        admin = session.query(User).filter(User.email == ADMIN_EMAIL).first()
        if not admin:
            admin = User(
                name="Store Admin",
                email=ADMIN_EMAIL,
                password_hash=get_password_hash(ADMIN_PASSWORD),
                role=Role.ADMIN.value,
            )
            session.add(admin)
            print(f"Created admin {ADMIN_EMAIL}")

        created = 0
        for category_name, titles in CATALOG.items():
            category = session.query(Category).filter(Category.name == category_name).first()
            if not category:
                category = Category(name=category_name, description=f"Fresh {category_name.lower()}")
                session.add(category)
                session.flush()

            for title in titles:
                if session.query(Product).filter(Product.title == title).first():
                    continue
                slug = title.lower().replace(" ", "-")
                session.add(Product(
                    title=title,
                    description=f"{title} from the {category_name.lower()} aisle.",
                    category_id=category.id,
                    price=round(random.uniform(20.0, 450.0), 2),
                    stock=random.randint(0, 120),
                    image=f"https://picsum.photos/seed/{slug}/400/400",
                ))
                created += 1

        session.commit()
        print(f"Inserted {created} products.")
    finally:
        session.close()


if __name__ == "__main__":
    seed()
