from abc import ABC, abstractmethod

from shopmate.domain.entities.session_state import SessionState


class SessionStorePort(ABC):
    @abstractmethod
    def get(self, token: str) -> SessionState | None:
        """Return the session, or None if unknown or expired."""
        raise NotImplementedError

    @abstractmethod
    def save(self, state: SessionState) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, token: str) -> None:
        raise NotImplementedError
