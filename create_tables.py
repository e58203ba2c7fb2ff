# create_tables.py
from app.database import Base, engine
import app.models  # noqa: F401  registers every table on Base.metadata

def create_tables(drop_existing: bool = False):
    """Create all tables"""
    try:
        if drop_existing:
            Base.metadata.drop_all(bind=engine)
            print("🗑️  Existing tables dropped")

        Base.metadata.create_all(bind=engine)
        print("✅ All tables created successfully!")
        return True

    except Exception as e:
        print(f"❌ Error creating tables: {e}")
        return False

if __name__ == "__main__":
    import sys
    ok = create_tables(drop_existing="--drop" in sys.argv)
    sys.exit(0 if ok else 1)
