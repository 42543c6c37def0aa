"""
Agent catalog: which agents each sector offers and which intent routes to which agent.

Agent names are registry names, not Python class names; logistics and
ecommerce both expose a "TrackingAgent", saas and telecom both expose a
"BillingQueryAgent".
"""

from typing import Optional

from callcenter.agents import (
    ecommerce,
    education,
    fintech,
    government,
    healthcare,
    logistics,
    realestate,
    saas,
    support,
    telecom,
    travel,
)
from callcenter.shared.constants import DEFAULT_SECTOR

FALLBACK_AGENT = "ComplaintAgent"

SECTOR_AGENTS: dict[str, dict[str, type]] = {
    "ecommerce": ecommerce.AGENTS,
    "healthcare": healthcare.AGENTS,
    "realestate": realestate.AGENTS,
    "logistics": logistics.AGENTS,
    "fintech": fintech.AGENTS,
    "saas": saas.AGENTS,
    "telecom": telecom.AGENTS,
    "education": education.AGENTS,
    "government": government.AGENTS,
    "travel": travel.AGENTS,
    "support": support.AGENTS,
}

# "<sector>.<agent name>" -> class; the form stored in sector_agents.agent_class
AGENT_CLASSES: dict[str, type] = {
    f"{sector}.{name}": cls
    for sector, agents in SECTOR_AGENTS.items()
    for name, cls in agents.items()
}

INTENT_AGENT_MAP: dict[str, dict[str, str]] = {
    "ecommerce": {
        "ORDER_LOOKUP": "OrderLookupAgent",
        "ORDER_STATUS": "OrderLookupAgent",
        "RETURN_REQUEST": "ReturnAgent",
        "REFUND": "RefundAgent",
        "CANCEL_ORDER": "CancelOrderAgent",
        "TRACKING": "TrackingAgent",
        "PRODUCT_INQUIRY": "ProductInquiryAgent",
        "PAYMENT_ISSUE": "PaymentIssueAgent",
        "ADDRESS_CHANGE": "AddressChangeAgent",
        "COMPLAINT": "ComplaintAgent",
        "EXCHANGE": "ExchangeAgent",
        "COD_ISSUE": "CODAgent",
        "INVOICE": "InvoiceAgent",
        "REGISTRATION": "RegistrationAgent",
        "TECHNICAL_SUPPORT": "TechnicalSupportAgent",
    },
    "healthcare": {
        "BOOK_APPOINTMENT": "AppointmentBookingAgent",
        "RESCHEDULE_APPOINTMENT": "AppointmentBookingAgent",
        "PRESCRIPTION_REFILL": "PrescriptionRefillAgent",
        "SYMPTOM_CHECK": "TriageAgent",
        "APPOINTMENT_REMINDER": "FollowUpAgent",
        "PATIENT_INFO": "PatientInfoAgent",
    },
    "realestate": {
        "PROPERTY_INQUIRY": "PropertyInquiryAgent",
        "SCHEDULE_SHOWING": "ShowingScheduleAgent",
        "LEAD_CAPTURE": "LeadCaptureAgent",
        "MAKE_OFFER": "LeadCaptureAgent",
        "OFFER_STATUS": "OfferStatusAgent",
    },
    "logistics": {
        "TRACK_PARCEL": "TrackingAgent",
        "SCHEDULE_PICKUP": "PickupScheduleAgent",
        "DELIVERY_FAILURE": "DeliveryFailureAgent",
        "ADDRESS_UPDATE": "AddressAgent",
    },
    "fintech": {
        "CHECK_BALANCE": "BalanceCheckAgent",
        "VERIFY_TRANSACTION": "TransactionVerifyAgent",
        "REPORT_FRAUD": "FraudReportAgent",
    },
    "saas": {
        "ONBOARDING": "OnboardingSupportAgent",
        "BILLING_QUERY": "BillingQueryAgent",
        "SCHEDULE_DEMO": "DemoSchedulingAgent",
        "FEATURE_QUESTION": "FeatureFAQAgent",
    },
    "telecom": {
        "REPORT_OUTAGE": "OutageNotificationAgent",
        "BILLING_QUERY": "BillingQueryAgent",
        "ACTIVATE_SERVICE": "ServiceActivationAgent",
        "SCHEDULE_TECHNICIAN": "AppointmentAgent",
    },
    "education": {
        "ENROLLMENT": "EnrollmentAgent",
        "BATCH_SCHEDULE": "BatchScheduleAgent",
        "REMINDER": "ReminderAgent",
        "ADMISSIONS_FAQ": "AdmissionsFAQAgent",
    },
    "government": {
        "PERMIT_TRACKING": "PermitTrackingAgent",
        "STATUS_UPDATE": "StatusUpdateAgent",
        "COMPLAINT_INTAKE": "ComplaintIntakeAgent",
        "CITIZEN_ROUTING": "CitizenRoutingAgent",
    },
    "travel": {
        "DISRUPTION_ALERT": "DisruptionAlertAgent",
        "CHECKIN_INFO": "CheckinInfoAgent",
        "ITINERARY_QA": "ItineraryQAAgent",
        "BOOKING_CONFIRMATION": "BookingConfirmationAgent",
    },
    "support": {
        "ISSUE_ESCALATION": "IssueEscalationAgent",
        "TICKET_CREATION": "TicketCreationAgent",
        "FAQ_LOOKUP": "FAQLookupAgent",
        "L1_SUPPORT": "L1SupportAgent",
    },
}


def agents_for_sector(sector: str) -> dict[str, type]:
    """Built-in agent set; unknown sectors get the ecommerce registry."""
    return SECTOR_AGENTS.get(sector, SECTOR_AGENTS[DEFAULT_SECTOR])


def resolve_agent_class(agent_class: str) -> Optional[type]:
    """Resolve a stored agent_class path such as 'agents.telecom.BillingQueryAgent'."""
    key = agent_class.strip()
    if key.startswith("agents."):
        key = key[len("agents."):]
    return AGENT_CLASSES.get(key)


def agent_for_intent(intent: str, sector: str = DEFAULT_SECTOR) -> str:
    name = INTENT_AGENT_MAP.get(sector, {}).get(intent)
    if name:
        return name
    return INTENT_AGENT_MAP[DEFAULT_SECTOR].get(intent, FALLBACK_AGENT)


def intents_for_sector(sector: str) -> list[str]:
    return list(INTENT_AGENT_MAP.get(sector, INTENT_AGENT_MAP[DEFAULT_SECTOR]))
