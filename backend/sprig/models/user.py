import enum

from sprig.config import Settings
from sprig.database import Database
from sprig.models.base import Entity


class UserStatus(str, enum.Enum):
    active = "active"
    suspended = "suspended"
    deleted = "deleted"


USERS_DDL = (
    """
    CREATE TABLE IF NOT EXISTS users (
      id VARCHAR(36) NOT NULL PRIMARY KEY,
      name VARCHAR(120) NOT NULL DEFAULT '',
      email VARCHAR(255) NOT NULL,
      password_hash VARCHAR(255) NOT NULL,
      status VARCHAR(20) NOT NULL DEFAULT 'active',
      bio TEXT,
      session_id VARCHAR(64),
      created_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
      updated_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    "CREATE UNIQUE INDEX IF NOT EXISTS uq_users_email ON users(email)",
    "CREATE INDEX IF NOT EXISTS idx_users_status ON users(status)",
    "CREATE INDEX IF NOT EXISTS idx_users_session ON users(session_id)",
)


class User(Entity):
    __tablename__ = "users"

    name: str = ""
    email: str = ""
    password_hash: str = ""
    status: str = UserStatus.active.value
    bio: str = ""
    session_id: str = ""

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.active.value

    def session_payload(self) -> dict:
        """User data carried by an authenticated session."""
        return {"id": self.id, "name": self.name, "email": self.email}

    @classmethod
    async def find_by(cls, db: Database, *, settings: Settings | None = None, **where) -> "User | None":
        row = await db.get(cls.__tablename__, ["*"], where)
        return cls(row, settings=settings) if row else None


async def ensure_user_schema(db: Database) -> None:
    for statement in USERS_DDL:
        await db.query(statement)
