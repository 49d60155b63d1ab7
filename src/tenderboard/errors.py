"""Exception hierarchy for TenderBoard.

Acquisition failures (network, payload, parse) never surface as exceptions -
they degrade to "not found". Everything here is for the service and storage
boundaries, which propagate to the caller.
"""


class TenderBoardError(Exception):
    """Base class for all TenderBoard errors."""


class ConfigurationError(TenderBoardError):
    """Required configuration (API key, model) is missing or invalid."""


class ServiceCallError(TenderBoardError):
    """The document-understanding service could not be reached or errored."""


class ServiceResponseError(TenderBoardError):
    """The service answered, but the payload is empty or malformed."""


class TenderNotFoundError(TenderBoardError):
    """No tender record exists with the requested ID."""

    def __init__(self, tender_id: str):
        super().__init__(f"Tender '{tender_id}' not found")
        self.tender_id = tender_id
