"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session

from .config import BaseConfig
from .infra.database import create_db_engine, create_session_factory, init_database
from .infra.repositories import (
    SQLModelAccountRepository,
    SQLModelCategoryRepository,
    SQLModelProfileRepository,
    SQLModelTransactionRepository,
)
from .models.user import User
from .services import auth


@dataclass
class AppContext:
    """Centralized application context with repositories and the signed-in user."""

    config: BaseConfig
    engine: Engine
    session_factory: Callable[[], Session]

    transaction_repo: SQLModelTransactionRepository
    account_repo: SQLModelAccountRepository
    category_repo: SQLModelCategoryRepository
    profile_repo: SQLModelProfileRepository

    current_user: Optional[User] = None

    def require_user_id(self) -> int:
        """Return the current user id or raise if not set."""

        if self.current_user is None or self.current_user.id is None:
            raise RuntimeError("User is not authenticated")
        return self.current_user.id

    def sign_in(self, username: str, password: str) -> User:
        self.current_user = auth.authenticate(
            username=username, password=password, session_factory=self.session_factory
        )
        return self.current_user

    def sign_out(self) -> None:
        self.current_user = None


def create_app_context(config: Optional[BaseConfig] = None) -> AppContext:
    """Create the engine, ensure the schema and wire repositories."""

    if config is None:
        config = BaseConfig()

    engine = create_db_engine(config)
    init_database(engine)
    session_factory = create_session_factory(engine)

    return AppContext(
        config=config,
        engine=engine,
        session_factory=session_factory,
        transaction_repo=SQLModelTransactionRepository(session_factory),
        account_repo=SQLModelAccountRepository(session_factory),
        category_repo=SQLModelCategoryRepository(session_factory),
        profile_repo=SQLModelProfileRepository(session_factory),
    )
