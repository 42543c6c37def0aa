"""
Real-estate agents: listings, showings, lead capture and offer tracking.
"""

import re

from callcenter.agents.base_agent import BaseAgent, make_reference
from callcenter.shared.errors import AgentValidationError

PHONE_RE = re.compile(r"^\+?[\d\s\-()]{10,}$")

MOCK_PROPERTY = {
    "address": "123 Oak Street, Springfield",
    "price": "$450,000",
    "bedrooms": 3,
    "bathrooms": 2,
    "sqft": 2100,
    "lot_size": 0.25,
    "property_type": "Single Family",
    "listing_status": "Active",
}

MOCK_OFFER = {
    "status": "PENDING_INSPECTION",
    "property": "123 Oak Street",
    "offer_amount": "$445,000",
    "last_update": "Awaiting home inspection results",
}

SHOWING_DURATION_MINS = 30


class PropertyInquiryAgent(BaseAgent):
    required_fields = ("property_id",)
    sector = "realestate"
    agent_type = "PROPERTY_INQUIRY"
    field_prompts = {"property_id": "What is the property ID or address you are interested in?"}

    async def handle(self) -> dict:
        p = MOCK_PROPERTY
        return {
            "status": "success",
            "property_id": self.data["property_id"],
            **p,
            "message": (
                f"{p['bedrooms']} bed, {p['bathrooms']} bath property at {p['address']}. "
                f"{p['sqft']} sq ft on {p['lot_size']} acre lot. Listed at {p['price']}. "
                f"Would you like to schedule a showing?"
            ),
        }


class ShowingScheduleAgent(BaseAgent):
    required_fields = ("property_id", "preferred_time", "buyer_name")
    sector = "realestate"
    agent_type = "SCHEDULE_SHOWING"
    field_prompts = {
        "property_id": "Which property would you like to see?",
        "preferred_time": "What time would you prefer for the showing?",
        "buyer_name": "What is your name?",
    }

    async def handle(self) -> dict:
        showing_id = make_reference("SHOWING")
        buyer = self.data["buyer_name"]
        when = self.data["preferred_time"]
        return {
            "status": "success",
            "showing_id": showing_id,
            "property_id": self.data["property_id"],
            "scheduled_time": when,
            "duration_mins": int(self.data.get("showing_duration_mins", SHOWING_DURATION_MINS)),
            "message": (
                f"Showing confirmed for {buyer} at {when}. Showing ID: {showing_id}. "
                f"Agent will meet you at the property."
            ),
        }


class LeadCaptureAgent(BaseAgent):
    required_fields = ("buyer_name", "buyer_phone", "property_interest")
    sector = "realestate"
    agent_type = "LEAD_CAPTURE"
    field_prompts = {
        "buyer_name": "May I have your name?",
        "buyer_phone": "What is the best phone number to reach you?",
        "property_interest": "What kind of property are you interested in?",
    }

    async def handle(self) -> dict:
        phone = str(self.data["buyer_phone"]).strip()
        if not PHONE_RE.match(phone):
            raise AgentValidationError(
                "Invalid phone number. Please provide a valid contact number.",
                field="buyer_phone",
            )
        name = self.data["buyer_name"]
        interest = self.data["property_interest"]
        return {
            "status": "success",
            "lead_id": make_reference("LEAD"),
            "lead_source": "PHONE_AI",
            "buyer_name": name,
            "message": (
                f"Thank you, {name}! We have captured your interest in {interest}. "
                f"Our team will follow up with you shortly at {phone}."
            ),
        }


class OfferStatusAgent(BaseAgent):
    required_fields = ("offer_id",)
    sector = "realestate"
    agent_type = "OFFER_STATUS"
    field_prompts = {"offer_id": "What is your offer ID?"}

    async def handle(self) -> dict:
        o = MOCK_OFFER
        return {
            "status": "success",
            "offer_id": self.data["offer_id"],
            "offer_status": o["status"],
            "message": (
                f"Your offer for {o['property']} at {o['offer_amount']} is currently "
                f"{o['status']}. Last update: {o['last_update']}"
            ),
        }


AGENTS = {
    "PropertyInquiryAgent": PropertyInquiryAgent,
    "ShowingScheduleAgent": ShowingScheduleAgent,
    "LeadCaptureAgent": LeadCaptureAgent,
    "OfferStatusAgent": OfferStatusAgent,
}
