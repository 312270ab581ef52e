from .notification import ClientMessage, ConnectedUsersRead, PendingNotificationRead

__all__ = ["ClientMessage", "ConnectedUsersRead", "PendingNotificationRead"]
