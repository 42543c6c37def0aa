"""
Per-sector onboarding requirements: which APIs a tenant must connect and the
setup fields the dashboard collects for them.
"""

import re
from typing import Optional

PHONE_NUMBER_RE = re.compile(r"^\+?\d{10,15}$")


def _text(label: str, required: bool = True, placeholder: Optional[str] = None, validation=None) -> dict:
    field_def = {"type": "text", "label": label, "required": required}
    if placeholder:
        field_def["placeholder"] = placeholder
    if validation is not None:
        field_def["validation"] = validation
    return field_def


def _password(label: str, required: bool = True, placeholder: Optional[str] = None) -> dict:
    field_def = {"type": "password", "label": label, "required": required}
    if placeholder:
        field_def["placeholder"] = placeholder
    return field_def


def _select(label: str, options: list[str], required: bool = True) -> dict:
    return {"type": "select", "label": label, "options": options, "required": required}


def _telephony_fields() -> dict:
    return {
        "exotel_number": _text("Exotel Phone Number", placeholder="+91XXXXXXXXXX", validation=PHONE_NUMBER_RE),
        "exotel_sid": _text("Exotel SID"),
        "exotel_token": _password("Exotel Token"),
    }


SECTOR_API_REQUIREMENTS: dict[str, dict] = {
    "ecommerce": {
        "name": "E-Commerce & D2C",
        "description": "Online stores, D2C brands, marketplaces",
        "required_apis": ["shopify", "exotel"],
        "optional_apis": ["stripe", "shipment_tracking", "inventory_management"],
        "fields": {
            "shopify_store_url": _text(
                "Shopify Store URL",
                placeholder="your-store.myshopify.com",
                validation=re.compile(r"^[a-z0-9-]+\.myshopify\.com$", re.IGNORECASE),
            ),
            "shopify_api_key": _password("Shopify API Key"),
            "shopify_access_token": _password("Shopify Access Token"),
            **_telephony_fields(),
        },
    },
    "healthcare": {
        "name": "Healthcare & Clinics",
        "description": "Hospitals, clinics, medical practices",
        "required_apis": ["emr", "hipaa_compliance", "exotel"],
        "optional_apis": ["prescription_db", "telehealth_platform"],
        "fields": {
            "emr_provider": _select("EMR Provider", ["epic", "cerner", "meditech", "allscripts", "athenahealth"]),
            "emr_api_url": _text("EMR API URL", placeholder="https://api.emr-provider.com/v1"),
            "emr_username": _text("EMR Username"),
            "emr_password": _password("EMR Password"),
            "practice_id": _text("Practice ID"),
            "hipaa_enabled": {"type": "checkbox", "label": "Enable HIPAA Compliance", "required": True},
            **_telephony_fields(),
        },
    },
    "realestate": {
        "name": "Real Estate & Properties",
        "description": "Property agents, brokers, management companies",
        "required_apis": ["mls", "exotel"],
        "optional_apis": ["zillow_api", "video_tour_platform", "property_management"],
        "fields": {
            "mls_api_key": _password("MLS API Key"),
            "mls_username": _text("MLS Username"),
            "mls_board_id": _text("MLS Board ID"),
            **_telephony_fields(),
        },
    },
    "fintech": {
        "name": "FinTech & Banking",
        "description": "Banks, fintech companies, payment providers",
        "required_apis": ["stripe", "banking_api", "kyc_provider", "exotel"],
        "optional_apis": ["compliance_monitoring", "fraud_detection"],
        "fields": {
            "stripe_api_key": _password("Stripe API Key", placeholder="pk_live_..."),
            "stripe_secret_key": _password("Stripe Secret Key", placeholder="sk_live_..."),
            "bank_api_token": _password("Banking API Token"),
            "kyc_provider": _select("KYC Provider", ["aadhaar", "pan", "passport", "driving_license"]),
            **_telephony_fields(),
        },
    },
    "hospitality": {
        "name": "Hotels & Restaurants",
        "description": "Hotels, resorts, restaurants, cafes",
        "required_apis": ["booking_system", "exotel"],
        "optional_apis": ["property_management", "review_management", "loyalty_program"],
        "fields": {
            "booking_api_key": _password("Booking System API Key"),
            "booking_provider": _select("Booking Provider", ["booking_com", "airbnb", "google_hotel", "custom"]),
            "property_id": _text("Property ID"),
            **_telephony_fields(),
        },
    },
    "logistics": {
        "name": "Logistics & Delivery",
        "description": "Courier companies, last-mile delivery, fleet management",
        "required_apis": ["shipment_tracking", "gps_mapping", "exotel"],
        "optional_apis": ["fleet_management", "route_optimization"],
        "fields": {
            "shipment_api_key": _password("Shipment Tracking API Key"),
            "gps_api_key": _password("GPS Mapping API Key"),
            **_telephony_fields(),
        },
    },
    "education": {
        "name": "Education & EdTech",
        "description": "Schools, colleges, universities, online learning platforms",
        "required_apis": ["lms_api", "student_database", "exotel"],
        "optional_apis": ["exam_platform", "assessment_tool"],
        "fields": {
            "lms_provider": _select("LMS Provider", ["moodle", "canvas", "blackboard", "schoology", "custom"]),
            "lms_api_url": _text("LMS API URL"),
            "lms_api_key": _password("LMS API Key"),
            "student_db_url": _text("Student Database URL"),
            **_telephony_fields(),
        },
    },
    "government": {
        "name": "Government & Public",
        "description": "Government agencies, municipalities, public services",
        "required_apis": ["citizen_portal", "compliance_tracking", "exotel"],
        "optional_apis": ["aadhar_verification", "digital_signature"],
        "fields": {
            "citizen_portal_url": _text("Citizen Portal URL"),
            "citizen_portal_key": _password("Portal API Key"),
            "compliance_module": _select("Compliance Module", ["rti", "rti_plus", "pg_sys", "citizen_portal"]),
            **_telephony_fields(),
        },
    },
    "telecom": {
        "name": "Telecom & Utilities",
        "description": "Telecom providers, ISPs, utility companies",
        "required_apis": ["telecom_provider_api", "exotel"],
        "optional_apis": ["billing_system", "network_monitoring"],
        "fields": {
            "telecom_provider": _select("Telecom Provider", ["jio", "airtel", "vodafone", "bsnl", "custom"]),
            "provider_api_key": _password("Provider API Key"),
            "billing_api_url": _text("Billing System URL"),
            **_telephony_fields(),
        },
    },
    "saas": {
        "name": "SaaS & Software",
        "description": "B2B software, platforms, developer tools",
        "required_apis": ["stripe", "saas_platform_api", "exotel"],
        "optional_apis": ["slack_integration", "github_api", "jira_api"],
        "fields": {
            "stripe_api_key": _password("Stripe API Key"),
            "stripe_secret_key": _password("Stripe Secret Key"),
            "platform_api_url": _text("Platform API URL"),
            "platform_api_key": _password("Platform API Key"),
            **_telephony_fields(),
        },
    },
}


def get_sector_requirements(sector: str) -> Optional[dict]:
    return SECTOR_API_REQUIREMENTS.get(sector)


def public_requirements(sector: str) -> Optional[dict]:
    """JSON-safe copy: compiled validation regexes become their pattern strings."""
    requirements = get_sector_requirements(sector)
    if requirements is None:
        return None
    fields = {}
    for name, field_def in requirements["fields"].items():
        field = dict(field_def)
        if "validation" in field:
            field["validation"] = field["validation"].pattern
        fields[name] = field
    return {**requirements, "fields": fields}


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_sector_fields(sector: str, values: dict) -> list[str]:
    """Return human-readable errors; empty means the values are acceptable."""
    requirements = get_sector_requirements(sector)
    if requirements is None:
        return [f"Unknown sector: {sector}"]

    errors = []
    for name, field_def in requirements["fields"].items():
        value = values.get(name)
        if _is_blank(value):
            if field_def.get("required"):
                errors.append(f"{field_def['label']} is required")
            continue
        if field_def["type"] == "checkbox":
            if not isinstance(value, bool):
                errors.append(f"{field_def['label']} must be true or false")
            continue
        validation = field_def.get("validation")
        if validation is not None and not validation.match(str(value).strip()):
            errors.append(f"{field_def['label']} has an invalid format")
        options = field_def.get("options")
        if options and value not in options:
            errors.append(f"{field_def['label']} must be one of: {', '.join(options)}")
    return errors
