"""
Telecom and utilities agents: outages, billing, activations and technician visits.
"""

import re
import zlib
from datetime import datetime, timezone

from callcenter.agents.base_agent import BaseAgent, make_reference
from callcenter.shared.errors import AgentValidationError

ACCOUNT_NUMBER_RE = re.compile(r"^\d{10}$")

ACTIVE_OUTAGES = (
    {
        "zip": "90210",
        "service_type": "Internet",
        "start_time": "2024-01-15 14:30 UTC",
        "estimated_restoration": "2024-01-15 18:00 UTC",
        "affected_areas": ["Beverly Hills", "West Hollywood"],
        "affected_count": 5234,
    },
    {
        "zip": "75001",
        "service_type": "Mobile",
        "start_time": "2024-01-15 15:45 UTC",
        "estimated_restoration": "2024-01-15 17:00 UTC",
        "affected_areas": ["Arlington", "Grand Prairie"],
        "affected_count": 12500,
    },
)

BILLING_ACCOUNTS = {
    "5551234567": {
        "customer_name": "John Smith",
        "current_balance": "$125.50",
        "due_date": "2024-02-05",
        "last_payment": "$89.99",
        "last_payment_date": "2024-01-15",
        "charges": [
            {"description": "Internet Service", "amount": "$79.99"},
            {"description": "Mobile Plan", "amount": "$45.99"},
            {"description": "Equipment Rental", "amount": "$10.00"},
        ],
    },
    "5559876543": {
        "customer_name": "Jane Doe",
        "current_balance": "$0.00",
        "due_date": "2024-02-10",
        "last_payment": "$156.87",
        "last_payment_date": "2024-01-20",
        "charges": [
            {"description": "Electricity", "amount": "$145.32"},
            {"description": "Gas", "amount": "$35.20"},
        ],
    },
}

SERVICE_PLANS = {
    "internet": {
        "Basic": {"monthly_cost": "$49.99", "activation_fee": "$99"},
        "Standard": {"monthly_cost": "$79.99", "activation_fee": "$99"},
        "Premium": {"monthly_cost": "$129.99", "activation_fee": "$0"},
    },
    "mobile": {
        "Basic": {"monthly_cost": "$39.99", "activation_fee": "$50"},
        "Standard": {"monthly_cost": "$59.99", "activation_fee": "$35"},
        "Unlimited": {"monthly_cost": "$89.99", "activation_fee": "$0"},
    },
    "electricity": {
        "Basic": {"monthly_cost": "$85.00", "activation_fee": "$0"},
        "Standard": {"monthly_cost": "$120.00", "activation_fee": "$150"},
    },
}

TECHNICIAN_SLOTS = ("8 AM - 12 PM", "12 PM - 4 PM", "4 PM - 8 PM")


class OutageNotificationAgent(BaseAgent):
    required_fields = ("service_type", "location_zip")
    sector = "telecom"
    agent_type = "REPORT_OUTAGE"
    field_prompts = {
        "service_type": "What type of service? (Internet, Mobile, Phone, Electricity, Water, Gas)",
        "location_zip": "What is your ZIP code?",
    }

    async def handle(self) -> dict:
        zip_code = str(self.data["location_zip"]).strip()
        service = str(self.data["service_type"]).strip()
        outage = next(
            (o for o in ACTIVE_OUTAGES
             if o["zip"] == zip_code and o["service_type"].lower() == service.lower()),
            None,
        )
        if outage is None:
            return {
                "status": "no_outage",
                "service_type": service,
                "location_zip": zip_code,
                "service_status": "OPERATIONAL",
                "last_checked": datetime.now(timezone.utc).isoformat(),
                "message": "No active outages reported in your area.",
            }
        return {
            "status": "outage_active",
            "service_type": service,
            "location_zip": zip_code,
            "outage_start": outage["start_time"],
            "estimated_restoration": outage["estimated_restoration"],
            "affected_areas": outage["affected_areas"],
            "customer_impact_count": outage["affected_count"],
            "message": (
                f"There is an active {outage['service_type']} outage in your area. "
                f"Estimated restoration: {outage['estimated_restoration']}. "
                f"We're aware of this outage and are working to restore service. Thank you for your patience."
            ),
        }


class TelecomBillingAgent(BaseAgent):
    required_fields = ("account_number", "query_type")
    sector = "telecom"
    agent_type = "BILLING_QUERY"
    field_prompts = {
        "account_number": "What is your account number? (10 digits on your bill)",
        "query_type": "What billing question do you have? (Current Balance, Payment History, Breakdown, Dispute)",
    }

    async def handle(self) -> dict:
        account_number = re.sub(r"[\s-]", "", str(self.data["account_number"]))
        if not ACCOUNT_NUMBER_RE.match(account_number):
            raise AgentValidationError(
                "Invalid account number format. Please check and try again.",
                field="account_number",
            )
        bill = BILLING_ACCOUNTS.get(account_number)
        if bill is None:
            raise AgentValidationError(
                "Account not found. Please verify your account number.",
                field="account_number",
            )
        query = str(self.data["query_type"]).strip().upper().replace(" ", "_")
        if query == "PAYMENT_HISTORY":
            message = f"Your last payment of {bill['last_payment']} was received on {bill['last_payment_date']}."
        elif query == "BREAKDOWN":
            items = ", ".join(f"{c['description']} {c['amount']}" for c in bill["charges"])
            message = f"Here's a breakdown of your charges: {items}."
        elif query == "DISPUTE":
            message = (
                "To dispute a charge, please provide details about the charge you're questioning. "
                "A billing specialist will contact you to investigate."
            )
        else:
            query = "CURRENT_BALANCE"
            message = f"Your current balance is {bill['current_balance']}. Payment is due by {bill['due_date']}."
        return {
            "status": "success",
            "account_number": account_number,
            "customer_name": bill["customer_name"],
            "query_type": query,
            "message": message,
        }


class ServiceActivationAgent(BaseAgent):
    required_fields = ("customer_name", "service_type", "plan_type")
    sector = "telecom"
    agent_type = "ACTIVATE_SERVICE"
    field_prompts = {
        "customer_name": "What is your name?",
        "service_type": "What service would you like to activate? (Internet, Mobile, Phone, Electricity, Gas, Water)",
        "plan_type": "Which plan? (Basic, Standard, Premium, Unlimited)",
    }

    async def handle(self) -> dict:
        service = str(self.data["service_type"]).strip()
        plan_name = str(self.data["plan_type"]).strip().capitalize()
        plan = SERVICE_PLANS.get(service.lower(), {}).get(plan_name)
        if plan is None:
            raise AgentValidationError("Selected service or plan is not available.", field="plan_type")
        return {
            "status": "activated",
            "activation_id": make_reference("ACTV"),
            "customer_name": self.data["customer_name"],
            "service_type": service,
            "plan_type": plan_name,
            **plan,
            "service_availability": "24-48 hours",
            "message": f"Service activated! Your {service} service will be active within 24-48 hours.",
        }


class TechnicianAppointmentAgent(BaseAgent):
    required_fields = ("customer_name", "service_type", "preferred_date")
    sector = "telecom"
    agent_type = "SCHEDULE_TECHNICIAN"
    field_prompts = {
        "customer_name": "What is your name?",
        "service_type": "What service requires an appointment? (Installation, Maintenance, Upgrade)",
        "preferred_date": "When would you prefer your appointment? (e.g., January 20, 2024)",
    }

    @staticmethod
    def assign_slot(preferred_date: str) -> str:
        return TECHNICIAN_SLOTS[zlib.crc32(preferred_date.encode("utf-8")) % len(TECHNICIAN_SLOTS)]

    async def handle(self) -> dict:
        name = self.data["customer_name"]
        day = str(self.data["preferred_date"]).strip()
        slot = self.assign_slot(day)
        return {
            "status": "scheduled",
            "appointment_id": make_reference("APT"),
            "customer_name": name,
            "service_type": self.data["service_type"],
            "scheduled_date": day,
            "time_slot": slot,
            "message": (
                f"Appointment confirmed for {name} on {day} between {slot}. "
                f"A technician will arrive within the specified window."
            ),
        }


AGENTS = {
    "OutageNotificationAgent": OutageNotificationAgent,
    "BillingQueryAgent": TelecomBillingAgent,
    "ServiceActivationAgent": ServiceActivationAgent,
    "AppointmentAgent": TechnicianAppointmentAgent,
}
