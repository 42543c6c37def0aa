"""
Government agents: department routing, complaint intake, application status and permit tracking.
"""

import re
from datetime import datetime, timezone

from callcenter.agents.base_agent import BaseAgent, make_reference
from callcenter.shared.errors import AgentValidationError

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

DEPARTMENTS = {
    "PERMITS": {
        "name": "Building & Zoning Department",
        "phone": "311",
        "email": "permits@government.gov",
        "hours": "Monday-Friday 9 AM - 5 PM",
        "portal": "permits.government.gov",
    },
    "LICENSES": {
        "name": "Business Licensing Department",
        "phone": "(555) 123-4567",
        "email": "licensing@government.gov",
        "hours": "Monday-Friday 8 AM - 4 PM",
        "portal": "licenses.government.gov",
    },
    "TAXES": {
        "name": "Tax Assessor's Office",
        "phone": "(555) 234-5678",
        "email": "taxes@government.gov",
        "hours": "Monday-Friday 9 AM - 5 PM",
        "portal": "taxes.government.gov",
    },
    "BENEFITS": {
        "name": "Social Services Department",
        "phone": "(555) 345-6789",
        "email": "benefits@government.gov",
        "hours": "Monday-Friday 8 AM - 5 PM, Saturday 10 AM - 2 PM",
        "portal": "benefits.government.gov",
    },
    "REGISTRATION": {
        "name": "Department of Records",
        "phone": "(555) 456-7890",
        "email": "records@government.gov",
        "hours": "Monday-Friday 9 AM - 4 PM",
        "portal": "records.government.gov",
    },
    "DOCUMENTATION": {
        "name": "Vital Records Department",
        "phone": "(555) 567-8901",
        "email": "vitals@government.gov",
        "hours": "Monday-Friday 8 AM - 5 PM",
        "portal": "vitals.government.gov",
    },
}

# Spoken stem -> department key
DEPARTMENT_STEMS = {
    "PERMIT": "PERMITS",
    "LICEN": "LICENSES",
    "TAX": "TAXES",
    "BENEFIT": "BENEFITS",
    "REGIST": "REGISTRATION",
    "DOCUMENT": "DOCUMENTATION",
    "CERTIFICATE": "DOCUMENTATION",
}

COMPLAINT_CATEGORIES = ("SERVICE_ISSUE", "MISCONDUCT", "BILLING", "OTHER")

APPLICATIONS = {
    "REF_1001": {
        "current_status": "UNDER_REVIEW",
        "submitted_date": "2024-01-10",
        "current_step": "Verification",
        "completion_percentage": 45,
        "estimated_completion": "2024-02-05",
        "details": "Your application is being verified. No further action is needed at this time.",
    },
    "REF_1002": {
        "current_status": "PENDING_DOCUMENTATION",
        "submitted_date": "2024-01-12",
        "current_step": "Document Review",
        "completion_percentage": 30,
        "estimated_completion": "2024-02-10",
        "details": "We need additional documentation. Please upload the required files within 7 days.",
    },
    "CMP_1003": {
        "current_status": "IN_INVESTIGATION",
        "submitted_date": "2024-01-15",
        "current_step": "Investigation",
        "completion_percentage": 60,
        "estimated_completion": "2024-02-15",
        "details": "Your complaint is being investigated. We will contact you once investigation is complete.",
    },
}

PERMITS = {
    "PERM_2024001": {
        "type": "Building",
        "issue_date": "2024-01-05",
        "expiration_date": "2024-07-05",
        "status": "ACTIVE",
        "contractor": "ABC Construction Co.",
        "inspections_completed": 2,
        "inspections_required": 4,
        "next_inspection": "2024-02-15",
    },
    "PERM_2024002": {
        "type": "Electrical",
        "issue_date": "2024-01-08",
        "expiration_date": "2024-06-08",
        "status": "PENDING_INSPECTION",
        "contractor": "XYZ Electric LLC",
        "inspections_completed": 1,
        "inspections_required": 2,
        "next_inspection": "2024-02-05",
    },
    "PERM_2024003": {
        "type": "Plumbing",
        "issue_date": "2024-01-12",
        "expiration_date": "2024-04-12",
        "status": "APPROVED",
        "contractor": "Pro Plumbing Services",
        "inspections_completed": 3,
        "inspections_required": 3,
        "next_inspection": None,
    },
}


def _key(value: str) -> str:
    return re.sub(r"[\s-]+", "_", value.strip()).upper()


class CitizenRoutingAgent(BaseAgent):
    """Routes a citizen inquiry to the department that handles it."""

    required_fields = ("inquiry_type", "location")
    sector = "government"
    agent_type = "CITIZEN_ROUTING"
    field_prompts = {
        "inquiry_type": "What is your inquiry about? (Permits, Licenses, Taxes, Benefits, Registration, Documentation)",
        "location": "Which city or county? (e.g., New York City, Los Angeles County)",
    }

    @staticmethod
    def route(inquiry_type: str):
        wanted = _key(inquiry_type)
        for stem, key in DEPARTMENT_STEMS.items():
            if stem in wanted:
                return DEPARTMENTS[key]
        return None

    async def handle(self) -> dict:
        department = self.route(str(self.data["inquiry_type"]))
        if department is None:
            raise AgentValidationError(
                "Unable to route your inquiry. Please try again with different details.",
                field="inquiry_type",
            )
        return {
            "status": "routed",
            "inquiry_type": self.data["inquiry_type"],
            "location": self.data["location"],
            "department": department["name"],
            "department_phone": department["phone"],
            "department_email": department["email"],
            "office_hours": department["hours"],
            "online_portal": department["portal"],
            "reference_number": make_reference("REF"),
            "message": (
                f"Your inquiry has been routed to the {department['name']}. "
                f"They will contact you within the next 2-3 business days."
            ),
        }


class ComplaintIntakeAgent(BaseAgent):
    required_fields = ("complaint_category", "complaint_description", "citizen_email")
    sector = "government"
    agent_type = "COMPLAINT_INTAKE"
    field_prompts = {
        "complaint_category": "What is your complaint about? (Service Issue, Misconduct, Billing, Other)",
        "complaint_description": "Please describe your complaint in detail.",
        "citizen_email": "What is your email address for follow-up?",
    }

    async def handle(self) -> dict:
        if not EMAIL_RE.match(str(self.data["citizen_email"]).strip()):
            raise AgentValidationError("Please provide a valid email address.", field="citizen_email")
        category = _key(str(self.data["complaint_category"]))
        if category not in COMPLAINT_CATEGORIES:
            raise AgentValidationError("Please select a valid complaint category.", field="complaint_category")

        complaint_id = make_reference("CMP")
        return {
            "status": "recorded",
            "complaint_id": complaint_id,
            "complaint_category": category,
            "complaint_description": self.data["complaint_description"],
            "citizen_email": self.data["citizen_email"],
            "submitted_at": datetime.now(timezone.utc).isoformat(),
            "estimated_review_time": "5-7 business days",
            "reference_url": f"https://complaints.government.gov/status/{complaint_id}",
            "message": (
                f"Your complaint has been recorded with ID {complaint_id}. "
                f"You will receive a confirmation email and status updates."
            ),
        }


class StatusUpdateAgent(BaseAgent):
    required_fields = ("reference_id", "id_type")
    sector = "government"
    agent_type = "STATUS_UPDATE"
    field_prompts = {
        "reference_id": "What is your application or complaint reference ID?",
        "id_type": "What type of application? (Permit, License, Benefit, Complaint, Registration)",
    }

    async def handle(self) -> dict:
        reference_id = _key(str(self.data["reference_id"]))
        application = APPLICATIONS.get(reference_id)
        if application is None:
            raise AgentValidationError("Reference ID not found. Please verify and try again.", field="reference_id")
        id_type = str(self.data["id_type"]).strip().lower()
        return {
            "status": application["current_status"],
            "reference_id": reference_id,
            "id_type": id_type,
            "submitted_date": application["submitted_date"],
            "current_step": application["current_step"],
            "completion_percentage": application["completion_percentage"],
            "estimated_completion": application["estimated_completion"],
            "contact_info": "For more information, call 311 or visit our office.",
            "message": f"Your {id_type} is currently {application['current_status']}. {application['details']}",
        }


class PermitTrackingAgent(BaseAgent):
    required_fields = ("permit_number", "property_address")
    sector = "government"
    agent_type = "PERMIT_TRACKING"
    field_prompts = {
        "permit_number": "What is your permit number?",
        "property_address": "What is the property address for this permit?",
    }

    async def handle(self) -> dict:
        permit_number = _key(str(self.data["permit_number"]))
        permit = PERMITS.get(permit_number)
        if permit is None:
            raise AgentValidationError(
                "Permit not found. Please verify the permit number and property address.",
                field="permit_number",
            )
        if permit["next_inspection"]:
            inspection = f"Next inspection scheduled for {permit['next_inspection']}"
        else:
            inspection = "All inspections completed. Awaiting final approval."
        return {
            "status": "success",
            "permit_number": permit_number,
            "property_address": self.data["property_address"],
            "permit_type": permit["type"],
            "issue_date": permit["issue_date"],
            "expiration_date": permit["expiration_date"],
            "current_status": permit["status"],
            "contractor_name": permit["contractor"],
            "inspections_completed": permit["inspections_completed"],
            "inspections_required": permit["inspections_required"],
            "next_inspection": permit["next_inspection"],
            "inspection_schedule": inspection,
            "message": (
                f"{permit['type']} Permit {permit_number} is {permit['status']}. "
                f"{permit['inspections_completed']} of {permit['inspections_required']} inspections completed."
            ),
        }


AGENTS = {
    "CitizenRoutingAgent": CitizenRoutingAgent,
    "ComplaintIntakeAgent": ComplaintIntakeAgent,
    "StatusUpdateAgent": StatusUpdateAgent,
    "PermitTrackingAgent": PermitTrackingAgent,
}
