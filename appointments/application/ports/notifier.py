from abc import ABC, abstractmethod

from appointments.application.dto.booking_notification import BookingNotification


class NotifierPort(ABC):
    @abstractmethod
    def send(self, notification: BookingNotification) -> None:
        raise NotImplementedError
