from sqlmodel import Session, create_engine

from core.config import DATABASE_URL

# Connects app to the record store (PostgreSQL in production, SQLite locally)


def make_engine(database_url: str, **kwargs):
    connect_args = {}
    if database_url.startswith("sqlite"):
        # FastAPI runs sync endpoints in a threadpool
        connect_args["check_same_thread"] = False
    # Note: echo=True will log all SQL statements, keep False in production
    return create_engine(database_url, echo=False, connect_args=connect_args, **kwargs)


# The Wire / Link That Lets Us Pass Data from App -> db
engine = make_engine(DATABASE_URL)


# Getter for this Wire, modified for FastAPI dependency injection
def get_session():
    with Session(engine) as session:
        try:
            yield session
        finally:
            session.close()
