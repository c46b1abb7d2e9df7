import sys

from loguru import logger

from markgraph.api import create_app
from markgraph.config import settings
from markgraph.doc_store import LocalDatabase

logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])

logger.info("Initializing markgraph with the local document database")
db = LocalDatabase(settings.database_path or None)
app = create_app(db=db, save_on_shutdown=bool(settings.database_path))
