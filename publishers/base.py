from abc import ABC, abstractmethod


class BasePublisher(ABC):
    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def configured(self) -> bool:
        """True when credentials are present; unconfigured publishers are skipped."""
        ...

    @abstractmethod
    async def publish(self, content: dict) -> dict:
        """Push an approved changelog entry and return {"success": bool, ...}."""
        ...
