"""Exceptions raised by the quiz SDK."""


class CatalogError(ValueError):
    """The catalog is inconsistent (missing id, unmapped outcome, ...).

    Indicates a broken build; never caught inside the SDK.
    """


class LeadSinkError(Exception):
    """The persistence sink could not store a lead.

    ``str(exc)`` is a user-displayable message.
    """
