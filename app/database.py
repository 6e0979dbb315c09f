"""Database configuration and initialization."""
import uuid

from sqlalchemy import create_engine
from sqlalchemy.orm import scoped_session, sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

# Create SQLAlchemy base
Base = declarative_base()

# Global session and engine
engine = None
db_session = None


def _engine_options(app):
    """Build create_engine() keyword arguments for the configured backend."""
    database_uri = app.config['SQLALCHEMY_DATABASE_URI']
    options = {'echo': app.config.get('SQLALCHEMY_ECHO', False)}

    if database_uri.startswith('sqlite'):
        # Single shared connection so an in-memory database survives across sessions
        options['connect_args'] = {'check_same_thread': False}
        options['poolclass'] = StaticPool
        return options

    options.update(
        pool_pre_ping=True,  # Enable connection health checks
        pool_size=10,
        max_overflow=20,
    )
    timeout_ms = app.config.get('REMOTE_CALL_TIMEOUT_MS')
    if timeout_ms and database_uri.startswith('postgresql'):
        options['connect_args'] = {'options': f'-c statement_timeout={int(timeout_ms)}'}
    return options


def init_db(app):
    """Initialize database connection."""
    global engine, db_session

    engine = create_engine(app.config['SQLALCHEMY_DATABASE_URI'], **_engine_options(app))

    db_session = scoped_session(
        sessionmaker(autocommit=False, autoflush=False, bind=engine)
    )

    Base.query = db_session.query_property()

    # Register teardown
    @app.teardown_appcontext
    def shutdown_session(exception=None):
        """Close database session and rollback on error."""
        if exception:
            db_session.rollback()
        db_session.remove()


def create_schema():
    """Create every table known to the models (CLI and tests)."""
    import app.models  # noqa: F401  (register mappers on Base.metadata)
    Base.metadata.create_all(bind=engine)


def drop_schema():
    """Drop every table known to the models."""
    import app.models  # noqa: F401
    Base.metadata.drop_all(bind=engine)


def get_session():
    """Get database session."""
    return db_session


def generate_uuid():
    """Primary key default for every table (string UUIDs, as the hosted store uses)."""
    return str(uuid.uuid4())
