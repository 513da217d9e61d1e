from abc import ABC, abstractmethod

from otp_service.models.otp import ChannelType, DeliveryResult


class DeliveryGateway(ABC):
    """Abstract base class for OTP delivery gateways."""

    @abstractmethod
    def send(self, recipient: str, code: str) -> DeliveryResult:
        """Deliver `code` to `recipient`. Never raises for transport errors."""
        ...

    @property
    @abstractmethod
    def channel(self) -> ChannelType:
        """Channel this gateway delivers over."""
        ...
