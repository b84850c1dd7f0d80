from notsoai.core.config import Settings
from notsoai.core.logger import logger
from notsoai.db.mock_data import MockDataAccess
from notsoai.db.repository import SqlDataAccess
from notsoai.db.session import build_session_factory, create_engine_for


def build_data_access(settings: Settings):
    """MockDataAccess or SqlDataAccess, depending on settings.use_mock_data."""
    if settings.use_mock_data:
        logger.info("Using mock data access")
        return MockDataAccess()

    engine = create_engine_for(settings.database_url)
    logger.info("Using SQL data access | dialect=%s", engine.dialect.name)
    return SqlDataAccess(build_session_factory(engine))
