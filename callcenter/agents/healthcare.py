"""
Healthcare agents: appointments, refills, symptom triage, reminders and FAQ.
"""

from callcenter.agents.base_agent import BaseAgent, make_reference
from callcenter.shared.errors import AgentEscalation

CRITICAL_SYMPTOMS = ("chest pain", "difficulty breathing", "unconscious", "severe bleeding")
HIGH_SYMPTOMS = ("fever", "persistent vomiting", "severe pain", "unable to move")

URGENCY_ADVICE = {
    "CRITICAL": (
        "calling 911 immediately",
        "Please hang up and call emergency services or go to the nearest emergency room.",
    ),
    "HIGH": (
        "seeing a doctor today",
        "Please schedule an urgent appointment or visit an urgent care center.",
    ),
    "MEDIUM": (
        "scheduling an appointment",
        "Your symptoms suggest a visit to your primary care doctor within 24-48 hours.",
    ),
}

CLINIC_FAQ = {
    "hours": "Our clinic is open Monday-Friday 9 AM to 6 PM, Saturday 10 AM to 2 PM.",
    "location": "We are located at 123 Health Street, Medical Center Building.",
    "insurance": "We accept most major insurance plans. Please bring your insurance card.",
    "forms": "New patient forms are available on our website or can be completed in person.",
}
DEFAULT_FAQ_ANSWER = (
    "For more detailed information, please contact the clinic directly "
    "or speak with a healthcare provider."
)


class AppointmentBookingAgent(BaseAgent):
    required_fields = ("patient_name", "preferred_time")
    sector = "healthcare"
    agent_type = "BOOK_APPOINTMENT"
    field_prompts = {
        "patient_name": "What is your name?",
        "preferred_time": "When would you like to schedule your appointment? (e.g., 2 PM tomorrow)",
    }

    async def handle(self) -> dict:
        appointment_id = make_reference("APPT")
        name = self.data["patient_name"]
        time_slot = self.data["preferred_time"]
        return {
            "status": "success",
            "appointment_id": appointment_id,
            "patient_name": name,
            "scheduled_time": time_slot,
            "confirmation_message": (
                f"Appointment confirmed for {name} at {time_slot}. "
                f"Your appointment ID is {appointment_id}."
            ),
        }


class PrescriptionRefillAgent(BaseAgent):
    required_fields = ("patient_id", "prescription_id")
    sector = "healthcare"
    agent_type = "PRESCRIPTION_REFILL"
    field_prompts = {
        "patient_id": "What is your patient ID or date of birth?",
        "prescription_id": "What is your prescription number?",
    }

    def refills_remaining(self) -> int:
        return int(self.data.get("refills_remaining", 3))

    async def handle(self) -> dict:
        remaining = self.refills_remaining()
        if remaining <= 0:
            raise AgentEscalation(
                "No refills remaining. Please contact your doctor.",
                reason="NO_REFILLS",
                prescription_id=self.data["prescription_id"],
            )
        return {
            "status": "success",
            "refill_id": make_reference("RX"),
            "prescription_id": self.data["prescription_id"],
            "refills_remaining": remaining - 1,
            "message": (
                f"Prescription refill approved. {remaining - 1} refills remaining. "
                f"Ready for pickup in 2 hours."
            ),
        }


class TriageAgent(BaseAgent):
    required_fields = ("symptoms",)
    sector = "healthcare"
    agent_type = "SYMPTOM_CHECK"
    field_prompts = {"symptoms": "Can you describe your symptoms?"}

    @staticmethod
    def assess_urgency(symptoms: str) -> str:
        text = symptoms.lower()
        if any(k in text for k in CRITICAL_SYMPTOMS):
            return "CRITICAL"
        if any(k in text for k in HIGH_SYMPTOMS):
            return "HIGH"
        return "MEDIUM"

    async def handle(self) -> dict:
        urgency = self.assess_urgency(str(self.data["symptoms"]))
        action, details = URGENCY_ADVICE[urgency]
        if urgency in ("CRITICAL", "HIGH"):
            raise AgentEscalation(
                "This requires immediate medical attention.",
                reason="URGENT_SYMPTOMS",
                urgency=urgency,
                recommendation=details,
            )
        return {
            "status": "success",
            "urgency": urgency,
            "recommended_action": action,
            "message": f"Based on your symptoms, we recommend {action}. {details}",
        }


class FollowUpAgent(BaseAgent):
    required_fields = ("patient_phone", "appointment_date")
    sector = "healthcare"
    agent_type = "APPOINTMENT_REMINDER"
    field_prompts = {
        "patient_phone": "What is your phone number for the reminder?",
        "appointment_date": "When is your appointment scheduled?",
    }

    async def handle(self) -> dict:
        reminder_time = "tomorrow at this time"
        return {
            "status": "success",
            "reminder_id": make_reference("REMINDER"),
            "appointment_date": self.data["appointment_date"],
            "reminder_time": reminder_time,
            "message": (
                f"Reminder scheduled for {reminder_time}. "
                f"You will receive an SMS reminder for your appointment."
            ),
        }


class PatientInfoAgent(BaseAgent):
    required_fields = ("query",)
    sector = "healthcare"
    agent_type = "PATIENT_INFO"
    field_prompts = {"query": "What health information can I help you with?"}

    async def handle(self) -> dict:
        query = str(self.data["query"]).lower()
        topic = next((t for t in CLINIC_FAQ if t in query), None)
        return {
            "status": "success",
            "topic": topic or "general",
            "message": CLINIC_FAQ.get(topic, DEFAULT_FAQ_ANSWER),
        }


AGENTS = {
    "AppointmentBookingAgent": AppointmentBookingAgent,
    "PrescriptionRefillAgent": PrescriptionRefillAgent,
    "TriageAgent": TriageAgent,
    "FollowUpAgent": FollowUpAgent,
    "PatientInfoAgent": PatientInfoAgent,
}
