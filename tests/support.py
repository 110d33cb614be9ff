"""Shared fixtures: an app wired to in-memory sqlite with recording collaborators."""

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from medadmin.core.config import Settings
from medadmin.core.database import build_engine, build_session_factory
from medadmin.core.security import create_access_token, hash_password
from medadmin.main import create_app
from medadmin.models import Base, Role, User
from medadmin.services.ai_service import AIServiceClient
from medadmin.services.audit import AuditRecorder
from medadmin.services.notifications import NotificationError

TEST_PASSWORD = "correct-horse-battery"


def make_settings(**overrides: object) -> Settings:
    values: dict = {
        "APP_ENV": "dev",
        "DATABASE_URL": "sqlite://",
        "JWT_SECRET": "test-secret-not-for-production",
        "BCRYPT_ROUNDS": 4,
        "APP_BASE_URL": "http://dashboard.test",
        "AI_SERVICE_URL": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class RecordingNotifier:
    """Keeps every link it is asked to deliver; optionally fails instead."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.verifications: list[tuple[str, str]] = []
        self.resets: list[tuple[str, str]] = []

    def send_verification(self, email: str, name: str, link: str) -> None:
        if self.fail:
            raise NotificationError("mail relay down")
        self.verifications.append((email, link))

    def send_password_reset(self, email: str, name: str, link: str) -> None:
        if self.fail:
            raise NotificationError("mail relay down")
        self.resets.append((email, link))


class AppHarness:
    """
    One application over a fresh in-memory database.

    Pass ai_service (e.g. an AIServiceClient over httpx.MockTransport) or
    audit_recorder to replace the defaults.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        ai_service: AIServiceClient | None = None,
        notifier: RecordingNotifier | None = None,
        audit_recorder: AuditRecorder | None = None,
    ) -> None:
        self.settings = settings or make_settings()
        self.engine = build_engine(self.settings)
        Base.metadata.create_all(self.engine)
        self.session_factory: sessionmaker[Session] = build_session_factory(self.engine)
        self.notifier = notifier or RecordingNotifier()
        self.app = create_app(
            self.settings,
            session_factory=self.session_factory,
            ai_service=ai_service or AIServiceClient(None),
            notifier=self.notifier,
            audit_recorder=audit_recorder,
        )
        self.client = TestClient(self.app)

    def close(self) -> None:
        self.client.close()
        Base.metadata.drop_all(self.engine)
        self.engine.dispose()

    def session(self) -> Session:
        return self.session_factory()

    def add_user(
        self,
        email: str,
        role: Role = Role.COLLABORATOR,
        *,
        name: str = "Test User",
        password: str = TEST_PASSWORD,
        disabled: bool = False,
    ) -> int:
        db = self.session()
        try:
            user = User(
                name=name,
                email=email,
                password_hash=hash_password(password, self.settings.BCRYPT_ROUNDS),
                role=role.value,
                disabled=disabled,
            )
            db.add(user)
            db.commit()
            return user.id
        finally:
            db.close()

    def auth_headers(self, user_id: int) -> dict[str, str]:
        token = create_access_token(sub=user_id, settings=self.settings)
        return {"Authorization": f"Bearer {token}"}
