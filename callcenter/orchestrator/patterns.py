"""
Built-in intent and entity patterns.

Used when the sector_intent_patterns table has nothing for a sector/language,
and to seed that table on first start. Patterns cover English and
Hindi/English code-mixed speech. Sector intents are listed in match order:
the first intent with a matching pattern wins.
"""

import re
from typing import Pattern

GENERIC_INTENT_PATTERNS: dict[str, list[str]] = {
    "GREETING": [r"^hello$", r"^hi$", r"^namaste$", r"^haan$", r"^ji$", r"^yes$"],
    "CANCEL_ACTION": [r"rehne.*do", r"cancel.*karo", r"nahi.*chahiye", r"mat.*karo", r"chodo", r"forget.*it"],
    "ESCALATION": [r"agent.*chahiye", r"agent.*laao", r"human.*chahiye", r"speak.*human", r"representative"],
}

SECTOR_INTENT_PATTERNS: dict[str, dict[str, list[str]]] = {
    "ecommerce": {
        "ORDER_LOOKUP": [r"order.*status", r"where.*order", r"order.*kaha.*hai", r"order.*check", r"mera.*order", r"delivery.*kab"],
        "RETURN_REQUEST": [r"return.*karna.*hai", r"return.*chahiye", r"wapas.*bhej", r"galat.*product", r"return"],
        "REFUND": [r"refund", r"paisa.*wapas", r"money.*back"],
        "CANCEL_ORDER": [r"cancel.*karna", r"cancel.*kar.*do", r"cancel.*order"],
        "TRACKING": [r"tracking", r"kahan.*pahunch", r"delivery.*location", r"track"],
        "PAYMENT_ISSUE": [r"payment.*fail", r"payment.*nahi.*hua", r"paisa.*cut.*gaya", r"amount.*debited"],
        "ADDRESS_CHANGE": [r"address.*change", r"change.*address", r"address.*badal", r"naya.*address"],
        "EXCHANGE": [r"exchange", r"badal.*do", r"size.*change", r"replace"],
        "COD_ISSUE": [r"\bcod\b", r"cash.*on.*delivery"],
        "INVOICE": [r"invoice", r"bill.*chahiye", r"gst.*bill"],
        "REGISTRATION": [r"register", r"sign.*up", r"new.*account", r"account.*banana"],
        "TECHNICAL_SUPPORT": [r"app.*not.*working", r"login", r"password", r"otp.*nahi", r"website.*down", r"error"],
        "PRODUCT_INQUIRY": [r"product", r"in.*stock", r"price.*kya", r"available.*hai"],
        "COMPLAINT": [r"complaint", r"shikayat", r"bahut.*bura", r"worst"],
    },
    "healthcare": {
        "RESCHEDULE_APPOINTMENT": [r"reschedule", r"appointment.*change", r"appointment.*nahi.*aa.*sakta", r"dobara.*appointment"],
        "BOOK_APPOINTMENT": [r"book.*appointment", r"appointment.*chahiye", r"doctor.*milna.*hai", r"clinic.*mein.*aa.*saku", r"schedule.*visit"],
        "PRESCRIPTION_REFILL": [r"prescription.*refill", r"medicine.*chahiye", r"medicines.*refill", r"dawa.*khatm", r"naya.*prescription", r"refill"],
        "SYMPTOM_CHECK": [r"symptoms", r"triage", r"mujhe.*lag.*raha", r"fever.*hai", r"cough.*hai", r"chest.*pain"],
        "APPOINTMENT_REMINDER": [r"appointment.*kab", r"appointment.*reminder", r"mera.*appointment", r"remind"],
        "PATIENT_INFO": [r"clinic.*hours", r"timing", r"insurance", r"location", r"forms"],
    },
    "realestate": {
        "SCHEDULE_SHOWING": [r"showing.*schedule", r"schedule.*showing", r"visit.*property", r"dekna.*chahta", r"tour.*chahiye", r"viewing.*time"],
        "OFFER_STATUS": [r"offer.*status", r"mera.*offer", r"accepted.*kya"],
        "MAKE_OFFER": [r"offer", r"bid", r"submit.*offer", r"price.*offer"],
        "LEAD_CAPTURE": [r"interested", r"call.*me.*back", r"contact.*me", r"looking.*for.*(house|home|flat)"],
        "PROPERTY_INQUIRY": [r"property", r"house", r"apartment", r"listing", r"details.*chahiye", r"price.*kya.*hai"],
    },
    "logistics": {
        "DELIVERY_FAILURE": [r"delivery.*fail", r"missed.*delivery", r"rescheduled.*delivery", r"not.*delivered"],
        "ADDRESS_UPDATE": [r"address.*wrong", r"address.*update", r"change.*address", r"address.*galat"],
        "SCHEDULE_PICKUP": [r"pickup", r"schedule.*pickup", r"parcel.*pickup", r"collection.*schedule"],
        "TRACK_PARCEL": [r"tracking", r"track.*parcel", r"parcel.*kaha", r"delivery.*kab", r"shipment.*status"],
    },
    "fintech": {
        "REPORT_FRAUD": [r"fraud", r"unauthorized", r"dispute.*transaction", r"wrong.*charge"],
        "VERIFY_TRANSACTION": [r"verify", r"otp", r"confirm.*transaction", r"transaction.*verify"],
        "CHECK_BALANCE": [r"balance", r"account.*balance", r"kitna.*paisa", r"available.*funds"],
    },
    "saas": {
        "BILLING_QUERY": [r"billing", r"invoice", r"subscription", r"upgrade", r"plan"],
        "SCHEDULE_DEMO": [r"demo", r"walkthrough", r"see.*product"],
        "FEATURE_QUESTION": [r"feature", r"capability", r"integration", r"\bapi\b", r"does.*it"],
        "ONBOARDING": [r"setup", r"set.*up", r"get.*started", r"onboard", r"help.*me.*start"],
    },
    "telecom": {
        "REPORT_OUTAGE": [r"outage", r"internet.*down", r"no.*signal", r"not.*working", r"offline"],
        "BILLING_QUERY": [r"bill", r"charge", r"amount.*due", r"payment"],
        "SCHEDULE_TECHNICIAN": [r"technician", r"installation", r"engineer", r"repair.*visit"],
        "ACTIVATE_SERVICE": [r"activate", r"new.*connection", r"new.*service", r"upgrade.*plan"],
    },
    "education": {
        "ENROLLMENT": [r"enrol", r"register.*course", r"course.*register", r"sign.*up.*(course|class)", r"course.*join"],
        "BATCH_SCHEDULE": [r"batch", r"semester.*schedule", r"timetable", r"class.*timing", r"when.*classes"],
        "REMINDER": [r"remind", r"deadline.*alert", r"yaad.*dila"],
        "ADMISSIONS_FAQ": [r"admission", r"how.*apply", r"eligib", r"apply.*karna"],
    },
    "government": {
        "PERMIT_TRACKING": [r"permit.*(status|track|kaha)", r"track.*permit", r"\bperm_\d+", r"inspection"],
        "STATUS_UPDATE": [r"status", r"track.*application", r"application.*kaha", r"\b(?:ref|cmp)_\d+"],
        "COMPLAINT_INTAKE": [r"complaint", r"shikayat", r"grievance", r"file.*report"],
        "CITIZEN_ROUTING": [r"department", r"who.*(handles|deals)", r"which.*office", r"connect.*me", r"route.*(me|call)"],
    },
    "travel": {
        "DISRUPTION_ALERT": [r"flight.*cancel", r"cancel+ed", r"delay", r"disruption", r"weather", r"price.*drop", r"closed"],
        "CHECKIN_INFO": [r"check.?in\b", r"wifi", r"parking", r"amenit"],
        "ITINERARY_QA": [r"itinerary", r"trip.*plan", r"excursion"],
        "BOOKING_CONFIRMATION": [r"confirm", r"booking.*(details|status)", r"reservation"],
    },
    "support": {
        "ISSUE_ESCALATION": [r"escalat", r"supervisor", r"manager", r"\btkt_\d+"],
        "TICKET_CREATION": [r"(create|open|raise|new).*ticket", r"ticket.*banao"],
        "FAQ_LOOKUP": [r"\bfaq\b", r"how.*do.*i", r"how.*to", r"article"],
        "L1_SUPPORT": [r"need.*support", r"technical.*help", r"help.*with", r"support.*chahiye", r"something.*wrong"],
    },
}

_PHONE = r"(\+?\d{10,12})"
_EMAIL = r"([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})"

ENTITY_PATTERNS: dict[str, dict[str, list[str]]] = {
    "ecommerce": {
        "order_id": [r"order.*?(\d{4,10})", r"\b(\d{4,10})\b"],
        "product_id": [r"product.*?(\d+)", r"sku.*?(\d+)"],
        "tracking_number": [r"tracking.*?(\d+)", r"awb.*?(\d+)"],
        "phone": [_PHONE],
        "email": [_EMAIL],
    },
    "healthcare": {
        "patient_id": [r"patient.*?(\d+)", r"mrn.*?(\d+)"],
        "appointment_id": [r"appointment.*?(\d+)", r"slot.*?(\d+)"],
        "prescription_id": [r"prescription.*?(\d+)", r"rx.*?(\d+)"],
        "phone": [_PHONE],
        "email": [_EMAIL],
    },
    "realestate": {
        "property_id": [r"property.*?(\d+)", r"listing.*?(\d+)"],
        "phone": [_PHONE],
        "email": [_EMAIL],
    },
    "logistics": {
        "parcel_id": [r"parcel.*?(\d+)", r"shipment.*?(\d+)"],
        "tracking_number": [r"tracking.*?(\d+)", r"awb.*?(\d+)"],
        "phone": [_PHONE],
    },
    "fintech": {
        "account_id": [r"account.*?(\d{4,})"],
        "transaction_id": [r"(?:transaction|txn)\s*(?:id|number)?\s*[:#]?\s*([a-z0-9_-]*\d[a-z0-9_-]*)"],
        "otp": [r"otp.*?(\d{6})"],
    },
    "saas": {
        "account_id": [r"\b(acc_\d+)\b"],
        "email": [_EMAIL],
    },
    "telecom": {
        "account_number": [r"account.*?(\d{10})"],
        "location_zip": [r"zip.*?(\d{5})", r"pin.*?(\d{5,6})"],
    },
    "education": {
        "student_id": [r"student.*?(\d{8})", r"\b(\d{8})\b"],
        "courses": [r"\b([a-z]{2,4}\s?\d{3}(?:\s*(?:,|and)\s*[a-z]{2,4}\s?\d{3})*)\b"],
        "reminder_type": [r"\b(registration|exams?|assignments?|tuition|grades?)\b"],
        "question_topic": [r"\b(requirements?|application|deadlines?|fees?|documents?|essay|timeline)\b"],
    },
    "government": {
        "reference_id": [r"\b((?:ref|cmp)_\d+)\b"],
        "permit_number": [r"\b(perm_\d+)\b"],
        "inquiry_type": [r"\b(permits?|licen[sc]es?|tax(?:es)?|benefits?|registration|documentation|certificates?)\b"],
        "citizen_email": [_EMAIL],
    },
    "travel": {
        "booking_reference": [r"\b(bk\d{3}[a-z]{3})\b"],
        "disruption_type": [r"(price drop)", r"(property closure)", r"(weather)", r"(flight)"],
        "email": [_EMAIL],
    },
    "support": {
        "ticket_id": [r"\b(tkt_\d+)\b"],
        "search_query": [r"(how (?:do i|to) .+)"],
        "issue_description": [r"help with (.+)"],
        "escalation_reason": [r"escalat\w*.*?(?:because|due to)\s+(.+)"],
        "customer_email": [_EMAIL],
    },
}


def compile_patterns(raw: dict[str, list[str]]) -> dict[str, list[Pattern]]:
    return {name: [re.compile(p, re.IGNORECASE) for p in patterns] for name, patterns in raw.items()}


def normalize_db_regex(pattern: str) -> str:
    """Strip JavaScript-style '/.../i' delimiters from a stored pattern."""
    text = pattern.strip()
    if len(text) > 1 and text.startswith("/"):
        end = text.rfind("/")
        flags = text[end + 1:]
        if end > 0 and (not flags or flags.isalpha()):
            return text[1:end]
    return text
