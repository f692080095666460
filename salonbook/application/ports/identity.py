from abc import ABC, abstractmethod

from salonbook.domain.entities.session import Session


class IdentityPort(ABC):
    @abstractmethod
    def resolve(self, token: str) -> Session | None:
        """Resolve a bearer credential to the signed-in principal, or None."""
        raise NotImplementedError
