"""
Domain-specific exception hierarchy for the booking slots application.

Every ``Rejection`` is a user-correctable input error. It names the request
field it belongs to so a web layer can show the message next to that field.
"""

from typing import Dict, List, Optional


FIELD_ATTRIBUTES: Dict[str, str] = {
    "customer_id": "customer",
    "employee_id": "employee",
    "activity_id": "activity",
    "start_time": "start time",
    "end_time": "end time",
    "date": "date",
}


def attribute_name(field: str) -> str:
    """Return the readable name of a request field."""
    return FIELD_ATTRIBUTES.get(field, field.replace("_", " "))


class BookingSlotsError(Exception):
    """Base class for all application-level errors."""


class RecordNotFound(BookingSlotsError):
    """Raised when a service is asked to act on an unknown record id."""


class DataFileError(BookingSlotsError):
    """Raised when the repository data file cannot be read or parsed."""


class Rejection(BookingSlotsError):
    """
    A booking or roster request was rejected.

    Attributes:
        field: Request field the rejection is reported against
        kind: Name of the rejection kind (e.g. ``"EmployeeUnavailable"``)
        message: Message suitable for showing to the user
    """

    default_field = ""
    template = "The {attribute} is invalid."

    def __init__(self, field: Optional[str] = None, message: Optional[str] = None):
        self.field = field or self.default_field
        self.message = message or self.template.format(attribute=attribute_name(self.field))
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        return type(self).__name__

    def errors(self) -> Dict[str, List[str]]:
        """Return the rejection as a ``{field: [message]}`` mapping."""
        return {self.field: [self.message]}

    def __repr__(self) -> str:
        return f"{self.kind}(field={self.field!r})"


class ReferenceNotFound(Rejection):
    """A referenced customer, employee or activity does not exist."""

    template = "The {attribute} does not exist."


class MalformedInput(Rejection):
    """A time or date field could not be parsed."""

    template = "The {attribute} field must be in the correct time format."
    date_template = "The {attribute} is not a valid date."

    def __init__(self, field: Optional[str] = None, message: Optional[str] = None):
        if message is None and field == "date":
            message = self.date_template.format(attribute=attribute_name(field))
        super().__init__(field, message)


class InvalidRange(Rejection):
    """A working time does not start before it ends."""

    default_field = "start_time"
    template = "The start time must be before end time."


class InvalidDuration(Rejection):
    """The activity duration pushes the end of a booking into the next day."""

    default_field = "activity_id"
    template = (
        "The activity duration added on start time is invalid. "
        "Please add a start time that does not go to the next day."
    )


class EmployeeUnavailable(Rejection):
    """The employee is not working at that time or is already booked."""

    default_field = "employee_id"
    template = (
        "The employee either has a conflict with another booking "
        "or employee is not working on that time."
    )


class CustomerDoubleBooked(Rejection):
    """The customer already has a booking overlapping the requested time."""

    default_field = "customer_id"
    template = "You already have an existing booking at that time."


class OutOfSchedulingWindow(Rejection):
    """A working time date lies outside the roster weeks of next month."""

    default_field = "date"
    template = "The date must fall within the roster weeks of next month."


class DuplicateWorkingTime(Rejection):
    """The employee already has a working time on that date."""

    default_field = "employee_id"
    template = "The employee can only have one working time per day."
