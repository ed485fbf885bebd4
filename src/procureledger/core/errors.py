"""
Stable error codes returned by the registry components.

Codes are part of the public call surface: interoperating callers match
on the numeric value, so members must never be renumbered.
"""

from __future__ import annotations

from enum import IntEnum


class TenderError(IntEnum):
    """Failure codes for the tender registry."""

    NOT_AUTHORIZED = 100
    INVALID_TITLE = 102
    INVALID_DESCRIPTION = 103
    INVALID_DEADLINE = 104
    INVALID_ELIGIBILITY = 105
    TENDER_ALREADY_EXISTS = 106
    TENDER_NOT_FOUND = 107
    INVALID_BUDGET = 108
    INVALID_CATEGORY = 109
    INVALID_STATUS = 110
    MAX_TENDERS_EXCEEDED = 111
    INVALID_METADATA_HASH = 112
    INVALID_CREATOR = 113
    INVALID_THRESHOLD = 114


class BidderError(IntEnum):
    """Failure codes for the bidder qualifier."""

    NOT_AUTHORIZED = 100
    INVALID_QUALIFICATION_HASH = 102
    INVALID_PROOF_HASH = 103
    INVALID_THRESHOLD = 104
    BIDDER_ALREADY_REGISTERED = 105
    BIDDER_NOT_FOUND = 106
    INVALID_FINANCIAL_PROOF = 107
    INVALID_LICENSE = 108
    QUALIFICATION_NOT_MET = 109
    MAX_BIDDERS_EXCEEDED = 110
    INVALID_CRITERIA = 111
    INVALID_DOC_HASH = 112
    INVALID_EXPERIENCE = 113
    INVALID_STATUS = 114


class AuditError(IntEnum):
    """Failure codes for the audit verifier."""

    NOT_AUTHORIZED = 100
    INVALID_TENDER_ID = 101
    INVALID_BID_ID = 102
    NO_TENDER_DATA = 104
    NO_BID_DATA = 105
    INVALID_HASH = 106
    INVALID_STATUS = 107
    INVALID_THRESHOLD = 108
    INVALID_PRINCIPAL = 110
    DUPLICATE_QUERY = 111
    INVALID_VERIFICATION = 113
    INVALID_REQUEST_ID = 114
