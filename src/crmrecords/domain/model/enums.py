"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class RecordType(StrEnum):
    ACCOUNT = "Account"
    CONTACT = "Contact"
    OPPORTUNITY = "Opportunity"
    LEAD = "Lead"
    CASE = "Case"


class OpportunityStage(StrEnum):
    PROSPECTING = "Prospecting"
    QUALIFICATION = "Qualification"
    NEEDS_ANALYSIS = "Needs Analysis"
    VALUE_PROPOSITION = "Value Proposition"
    PROPOSAL = "Proposal"
    NEGOTIATION = "Negotiation"
    CLOSED_WON = "Closed Won"
    CLOSED_LOST = "Closed Lost"


class LeadStatus(StrEnum):
    OPEN = "Open - Not Contacted"
    WORKING = "Working - Contacted"
    CONVERTED = "Closed - Converted"
    NOT_CONVERTED = "Closed - Not Converted"


class CaseStatus(StrEnum):
    NEW = "New"
    WORKING = "Working"
    ESCALATED = "Escalated"
    CLOSED = "Closed"


class CaseOrigin(StrEnum):
    PHONE = "Phone"
    EMAIL = "Email"
    WEB = "Web"
