import importlib
import logging
import os

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from storefront.config import settings

logger = logging.getLogger(__name__)

DATABASE_URL = settings.DATABASE_URL
_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}
engine = create_engine(DATABASE_URL, future=True, echo=False, connect_args=_connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

# Model modules that must be imported before create_all so metadata is populated.
MODEL_MODULES = [
    "storefront.models.product",
    "storefront.models.pin_event",
]


def _should_reset(reset):
    if reset is not None:
        return reset
    if settings.RESET_DB:
        return True
    return os.environ.get("RESET_DB", "false").lower() in ("1", "true", "yes")


def init_db(reset=None, seed=True):
    """
    Initialize the upstream catalogue schema.

    Behavior:
      - reset=True (or RESET_DB set) drops and recreates every table.
      - seed=True loads the packaged catalogue when the products table is empty.
    """
    for mod in MODEL_MODULES:
        importlib.import_module(mod)

    if _should_reset(reset):
        logger.info("Resetting catalogue database")
        Base.metadata.drop_all(bind=engine)

    Base.metadata.create_all(bind=engine)

    if not seed:
        return

    from storefront.repositories.product_repo import ProductRepository
    from storefront.seed import load_catalogue

    s = SessionLocal()
    try:
        repo = ProductRepository(s)
        if repo.count() == 0:
            entries = load_catalogue(settings.CATALOGUE_SEED_FILE)
            for rank, entry in enumerate(entries, start=1):
                repo.create_or_update(rank=rank, **entry)
            s.commit()
            logger.info("Seeded %d catalogue products", len(entries))
    finally:
        s.close()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
