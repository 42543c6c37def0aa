"""
Travel agents: booking confirmation, itinerary questions, check-in details and disruption handling.
"""

import re

from callcenter.agents.base_agent import BaseAgent
from callcenter.shared.errors import AgentValidationError

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

BOOKINGS = {
    "BK123ABC": {
        "property": "Paradise Beach Resort",
        "check_in": "2024-02-15",
        "check_out": "2024-02-20",
        "nights": 5,
        "guests": 2,
        "total_price": "$1,250",
        "payment_status": "PAID",
        "confirmation": "CONF_987654",
        "cancellation": "Free cancellation up to 48 hours before check-in",
        "instructions": "Check-in at 3 PM. Keys available at front desk.",
    },
    "BK456DEF": {
        "property": "Mountain View Hotel",
        "check_in": "2024-03-01",
        "check_out": "2024-03-05",
        "nights": 4,
        "guests": 3,
        "total_price": "$640",
        "payment_status": "PENDING",
        "confirmation": "CONF_456789",
        "cancellation": "Non-refundable rate selected",
        "instructions": "Early check-in available on request. Room upgrade pending confirmation.",
    },
}

ITINERARIES = {
    "BK123ABC": {
        "destination": "Maldives",
        "activities": [
            {"date": "2024-02-15", "activity": "Arrival and welcome dinner", "time": "6:00 PM", "location": "Main Restaurant"},
            {"date": "2024-02-16", "activity": "Snorkeling excursion", "time": "8:00 AM", "location": "Coral Reef"},
            {"date": "2024-02-17", "activity": "Island hopping tour", "time": "9:00 AM", "location": "East Islands"},
            {"date": "2024-02-18", "activity": "Spa day", "time": "10:00 AM", "location": "Resort Spa"},
            {"date": "2024-02-19", "activity": "Sunset cruise", "time": "4:00 PM", "location": "Departure Point"},
        ],
    },
}

PROPERTIES = {
    "BK123ABC": {
        "name": "Paradise Beach Resort",
        "address": "123 Coral Way, Maldives 12345",
        "check_in_time": "3:00 PM",
        "check_out_time": "11:00 AM",
        "instructions": "Main entrance has a welcome desk. Staff will assist with baggage.",
        "wifi_name": "ParadiseGuest",
        "wifi_password": "Welcome123",
        "parking": "Complimentary beachfront parking available",
        "amenities": ["Swimming Pool", "Spa", "Gym", "Restaurant", "Beach Access", "Room Service"],
        "emergency_contact": "+960 123-4567",
        "rules": ["Quiet hours 10 PM - 8 AM", "No smoking in rooms", "Maximum 2 guests per room"],
        "key_location": "Front desk",
    },
    "BK456DEF": {
        "name": "Mountain View Hotel",
        "address": "456 Alpine Road, Switzerland 98765",
        "check_in_time": "2:00 PM",
        "check_out_time": "10:00 AM",
        "instructions": "Check-in at reception. Early check-in available upon request.",
        "wifi_name": "MountainViewWiFi",
        "wifi_password": "AlpsLife2024",
        "parking": "Indoor parking with electric charging stations",
        "amenities": ["Heated Indoor Pool", "Mountain Spa", "Sauna", "Gourmet Restaurant", "Hiking Trails"],
        "emergency_contact": "+41 123-4567",
        "rules": ["Quiet hours 11 PM - 7 AM", "Smoking on balconies only", "Pets allowed upon request"],
        "key_location": "Automated check-in kiosk or reception",
    },
}

DISRUPTIONS = {
    "FLIGHT_CANCELLATION": {
        "description": "your flight cancellation",
        "status": "Alternative flights have been secured.",
        "refund_eligible": True,
        "action_required": "Please confirm your preferred rescheduled flight within 24 hours.",
        "alternatives": [
            {"option": "Flight 1", "departure": "2024-02-16 08:00 AM", "airline": "United Airlines", "status": "AVAILABLE"},
            {"option": "Flight 2", "departure": "2024-02-16 02:00 PM", "airline": "Delta Airlines", "status": "AVAILABLE"},
            {"option": "Flight 3", "departure": "2024-02-17 06:00 AM", "airline": "American Airlines", "status": "AVAILABLE"},
        ],
    },
    "WEATHER": {
        "description": "severe weather at your destination",
        "status": "We are monitoring the situation closely.",
        "refund_eligible": True,
        "action_required": "You can postpone or cancel your trip without penalties.",
        "alternatives": [
            {"option": "Postpone trip to next week", "status": "No charges"},
            {"option": "Reschedule to alternative destination", "status": "Price match guaranteed"},
            {"option": "Full refund", "status": "Available"},
        ],
    },
    "PROPERTY_CLOSURE": {
        "description": "your booked property being temporarily closed",
        "status": "Alternative accommodations of equal or better quality have been arranged.",
        "refund_eligible": True,
        "action_required": "We will cover any price difference.",
        "alternatives": [
            {"property": "Luxury Ocean View Villa", "stars": 5, "price": "Same", "availability": "Available"},
            {"property": "Beach Resort Deluxe", "stars": 5, "price": "Same", "availability": "Available"},
            {"property": "Tropical Paradise Hotel", "stars": 4, "price": "Lower", "availability": "Available"},
        ],
    },
    "PRICE_DROP": {
        "description": "a significant price reduction for your booking",
        "status": "You are eligible for a refund of the difference.",
        "refund_eligible": False,
        "action_required": "Accept the refund or upgrade your accommodations at no extra cost.",
        "alternatives": [],
    },
}

SUPPORT_CONTACT = "24/7 Support Team: 1-800-TRAVEL-1 or chat@travel.com"


def _booking_ref(value) -> str:
    return re.sub(r"[\s-]", "", str(value)).upper()


class TravelAgent(BaseAgent):
    sector = "travel"

    def get_booking(self) -> tuple[str, dict]:
        reference = _booking_ref(self.data["booking_reference"])
        booking = BOOKINGS.get(reference)
        if booking is None:
            raise AgentValidationError(
                "Booking not found. Please verify your booking reference.",
                field="booking_reference",
            )
        return reference, booking


class BookingConfirmationAgent(TravelAgent):
    required_fields = ("booking_reference", "email")
    agent_type = "BOOKING_CONFIRMATION"
    field_prompts = {
        "booking_reference": "What is your booking reference number? (e.g., BK123ABC)",
        "email": "What email address should we send the confirmation to?",
    }

    async def handle(self) -> dict:
        email = str(self.data["email"]).strip()
        if not EMAIL_RE.match(email):
            raise AgentValidationError("Please provide a valid email address.", field="email")
        reference, booking = self.get_booking()
        return {
            "status": "confirmed",
            "booking_reference": reference,
            "property": booking["property"],
            "check_in": booking["check_in"],
            "check_out": booking["check_out"],
            "number_of_nights": booking["nights"],
            "total_guests": booking["guests"],
            "total_price": booking["total_price"],
            "payment_status": booking["payment_status"],
            "confirmation_number": booking["confirmation"],
            "cancellation_policy": booking["cancellation"],
            "check_in_instructions": booking["instructions"],
            "message": (
                f"Your booking at {booking['property']} from {booking['check_in']} to "
                f"{booking['check_out']} is confirmed. Confirmation sent to {email}"
            ),
        }


class ItineraryQAAgent(TravelAgent):
    required_fields = ("booking_reference", "question")
    agent_type = "ITINERARY_QA"
    field_prompts = {
        "booking_reference": "What is your booking reference number?",
        "question": "What would you like to know about your itinerary?",
    }

    @staticmethod
    def answer(question: str, booking: dict, itinerary: dict) -> dict:
        lowered = question.lower()
        if "activit" in lowered:
            return {
                "response": "Here are your scheduled activities:",
                "details": "\n".join(
                    f"{a['date']}: {a['activity']} at {a['time']} ({a['location']})"
                    for a in itinerary["activities"]
                ),
            }
        if "when" in lowered or "time" in lowered:
            return {
                "response": "Your trip details:",
                "details": (
                    f"Check-in: {booking['check_in']}, Check-out: {booking['check_out']}, "
                    f"Total: {booking['nights']} nights"
                ),
            }
        if "where" in lowered or "location" in lowered:
            return {
                "response": f"You're traveling to {itinerary['destination']}",
                "details": "Your hotel is located in a prime beachfront area. Airport transfer included.",
            }
        return {
            "response": "Here's information about your trip:",
            "details": (
                f"Destination: {itinerary['destination']}, "
                f"Activities: {len(itinerary['activities'])} scheduled events"
            ),
        }

    async def handle(self) -> dict:
        reference, booking = self.get_booking()
        itinerary = ITINERARIES.get(reference)
        if itinerary is None:
            raise AgentValidationError(
                "No itinerary is attached to this booking yet.", field="booking_reference",
            )
        reply = self.answer(str(self.data["question"]), booking, itinerary)
        return {
            "status": "success",
            "booking_reference": reference,
            "question": self.data["question"],
            "answer": reply["response"],
            "details": reply["details"],
            "message": f"{reply['response']} {reply['details']}",
            "contact_support": "For more information, contact our travel concierge.",
        }


class CheckinInfoAgent(TravelAgent):
    required_fields = ("booking_reference",)
    agent_type = "CHECKIN_INFO"
    field_prompts = {
        "booking_reference": "What is your booking reference number?",
    }

    async def handle(self) -> dict:
        reference, _ = self.get_booking()
        info = PROPERTIES[reference]
        return {
            "status": "success",
            "booking_reference": reference,
            "property_name": info["name"],
            "address": info["address"],
            "check_in_time": info["check_in_time"],
            "check_out_time": info["check_out_time"],
            "check_in_instructions": info["instructions"],
            "wifi_name": info["wifi_name"],
            "wifi_password": info["wifi_password"],
            "parking_info": info["parking"],
            "amenities": info["amenities"],
            "emergency_contact": info["emergency_contact"],
            "house_rules": info["rules"],
            "key_location": info["key_location"],
            "message": (
                f"Check-in is at {info['check_in_time']}. Please arrive early enough "
                f"to collect your keys from {info['key_location']}."
            ),
        }


class DisruptionAlertAgent(TravelAgent):
    required_fields = ("booking_reference", "disruption_type")
    agent_type = "DISRUPTION_ALERT"
    field_prompts = {
        "booking_reference": "What is your booking reference number?",
        "disruption_type": "What is the disruption? (Flight Cancellation, Weather, Property Closure, Price Drop)",
    }

    @staticmethod
    def match_disruption(disruption_type: str):
        wanted = re.sub(r"[\s-]+", "_", disruption_type.strip()).upper()
        if wanted in DISRUPTIONS:
            return wanted
        # "my flight got cancelled" -> FLIGHT_CANCELLATION
        return next(
            (key for key in DISRUPTIONS if key.split("_")[0] in wanted),
            None,
        )

    async def handle(self) -> dict:
        reference, _ = self.get_booking()
        key = self.match_disruption(str(self.data["disruption_type"]))
        if key is None:
            raise AgentValidationError("Invalid disruption type.", field="disruption_type")
        disruption = DISRUPTIONS[key]
        alternatives = disruption["alternatives"]
        return {
            "status": "disruption_alert",
            "booking_reference": reference,
            "disruption_type": key,
            "issue": disruption["description"],
            "status_update": disruption["status"],
            "refund_eligible": disruption["refund_eligible"],
            "alternatives": alternatives,
            "action_required": disruption["action_required"],
            "contact_support": SUPPORT_CONTACT,
            "message": (
                f"We're aware of {disruption['description']}. {disruption['status']} "
                f"We have {len(alternatives)} alternative options available for you."
            ),
        }


AGENTS = {
    "BookingConfirmationAgent": BookingConfirmationAgent,
    "ItineraryQAAgent": ItineraryQAAgent,
    "CheckinInfoAgent": CheckinInfoAgent,
    "DisruptionAlertAgent": DisruptionAlertAgent,
}
