"""Database layer package for all SQL and persistence boundaries."""

from .health import SQLAlchemyDatabaseHealthService
from .interfaces import DatabaseHealthPort, PublicationJobRecord, PublicationJobRepositoryPort
from .publication_job import SQLAlchemyPublicationJobRepository
from .session import db_create_engine

__all__ = [
	"DatabaseHealthPort",
	"PublicationJobRecord",
	"PublicationJobRepositoryPort",
	"SQLAlchemyDatabaseHealthService",
	"SQLAlchemyPublicationJobRepository",
	"db_create_engine",
]
