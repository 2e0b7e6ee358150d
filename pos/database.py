"""Database configuration and initialization."""
from sqlalchemy import create_engine
from sqlalchemy.orm import scoped_session, sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

# Create SQLAlchemy base
Base = declarative_base()

# Global session and engine
engine = None
db_session = None


def _engine_options(database_uri: str, echo: bool) -> dict:
    """Build create_engine kwargs for the configured backend."""
    options = {'echo': echo}
    if database_uri.startswith('sqlite'):
        # SQLite connections are shared between Flask worker threads
        options['connect_args'] = {'check_same_thread': False}
        if database_uri in ('sqlite://', 'sqlite:///:memory:'):
            # Single connection so every session sees the same in-memory DB
            options['poolclass'] = StaticPool
    else:
        options['pool_pre_ping'] = True  # Enable connection health checks
        options['pool_size'] = 10
        options['max_overflow'] = 20
    return options


def init_db(app):
    """Initialize database connection."""
    global engine, db_session

    if db_session is not None:
        db_session.remove()

    database_uri = app.config['SQLALCHEMY_DATABASE_URI']
    engine = create_engine(
        database_uri,
        **_engine_options(database_uri, app.config.get('SQLALCHEMY_ECHO', False))
    )

    db_session = scoped_session(
        sessionmaker(autocommit=False, autoflush=False, bind=engine)
    )

    Base.query = db_session.query_property()

    if app.config.get('DB_CREATE_ALL', False):
        create_all()

    # Register teardown
    @app.teardown_appcontext
    def shutdown_session(exception=None):
        """Close database session and rollback on error."""
        if exception:
            db_session.rollback()
        db_session.remove()


def create_all():
    """Create every table known to the models package."""
    import pos.models  # noqa: F401  (registers mappers on Base)
    Base.metadata.create_all(bind=engine)


def get_session():
    """Get database session."""
    return db_session
