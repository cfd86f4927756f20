from jwt_blacklist.config import settings
from jwt_blacklist.database import init_db

if __name__ == "__main__":
    init_db()
    print(f"Created blacklist tables on {settings.DATABASE_URL}")
