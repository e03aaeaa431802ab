"""Create tables, default roles and an optional first admin"""
import argparse
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from print_erp.core.database import SessionLocal, engine, Base
from print_erp.core.security import get_password_hash
import print_erp.models  # noqa: F401  registers every table on Base.metadata
from print_erp.models.user import Role, User

DEFAULT_ROLES = [
    {"name": "Admin", "description": "Everything, including deleting orders, quotations and stock records"},
    {"name": "Manager", "description": "Raises, edits and pays purchase orders; manages suppliers and stock"},
    {"name": "Staff", "description": "Views procurement and inventory records"},
]

def init_db(admin_email=None, admin_password=None):
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        for role_data in DEFAULT_ROLES:
            if not db.query(Role).filter(Role.name == role_data["name"]).first():
                db.add(Role(**role_data))
        db.flush()

        if admin_email and admin_password:
            if not db.query(User).filter(User.email == admin_email).first():
                admin_role = db.query(Role).filter(Role.name == "Admin").one()
                db.add(User(
                    email=admin_email,
                    hashed_password=get_password_hash(admin_password),
                    full_name="Administrator",
                    role_id=admin_role.id,
                ))

        db.commit()
        print("Database initialized successfully!")
    except Exception as e:
        print(f"Error initializing database: {e}")
        db.rollback()
        raise
    finally:
        db.close()

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--admin-email")
    parser.add_argument("--admin-password")
    args = parser.parse_args()
    init_db(args.admin_email, args.admin_password)
