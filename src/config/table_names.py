from enum import Enum


class TableNames(str, Enum):
    INVITATIONS = "invitations"
    RESPONSES = "responses"
    VIEWS = "views"
    LOGS = "logs"
