from playergate.app.db.base import Base
from playergate.app.db.session import Database

__all__ = ["Base", "Database"]
