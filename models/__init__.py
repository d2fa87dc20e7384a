"""
Process-wide storage instance, matching the `from models import storage`
pattern used by the blueprints. The engine is bound lazily by create_app()
so each app (and each test) can point it at its own DATABASE_URL.
"""
from models.db_storage import DBStorage

storage = DBStorage()
