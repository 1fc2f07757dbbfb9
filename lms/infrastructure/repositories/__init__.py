from .certificates import CertificateRepository
from .courses import CourseRepository
from .progress import ProgressRepository
from .sessions import DatabaseSessionStore, RedisSessionStore, SessionStore
from .unit_of_work import UnitOfWork
from .users import UserRepository

__all__ = [
    "CertificateRepository",
    "CourseRepository",
    "DatabaseSessionStore",
    "ProgressRepository",
    "RedisSessionStore",
    "SessionStore",
    "UnitOfWork",
    "UserRepository",
]
