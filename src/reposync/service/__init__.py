"""Request surface over the synchronization core."""

from reposync.service._service import RepositoryService

__all__ = ["RepositoryService"]
