from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from dotenv import load_dotenv
import os

# Load environment variables from .env file (if exists)
load_dotenv()

# MSSQL connection variables
DB_USER = os.getenv("DB_USER")
DB_NAME = os.getenv("DB_NAME")
DB_HOST = os.getenv("DB_HOST")
DB_PORT = os.getenv("DB_PORT")
DB_PASS = os.getenv("DB_PASS")


def resolve_database_url():
    """Pick the database URL: MSSQL vars, then DATABASE_URL, then a SQLite file."""
    if DB_USER and DB_NAME and DB_HOST and DB_PORT and DB_PASS:
        return (
            f"mssql+pyodbc://{DB_USER}:{DB_PASS}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
            f"?driver=ODBC+Driver+18+for+SQL+Server&TrustServerCertificate=yes"
        )

    url = os.getenv("DATABASE_URL")
    if url:
        # Hosted Postgres providers still hand out postgres:// URLs
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql://", 1)
        return url

    db_file = "agency.db"
    if os.path.isdir("/tmp") and os.access("/tmp", os.W_OK):
        return f"sqlite:////tmp/{db_file}"
    return f"sqlite:///./{db_file}"


SQLALCHEMY_DATABASE_URL = resolve_database_url()

connect_args = {}
if SQLALCHEMY_DATABASE_URL.startswith("sqlite"):
    connect_args = {"check_same_thread": False}

# Lazy connection (doesn't connect until first use)
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args=connect_args,
    pool_pre_ping=True
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
