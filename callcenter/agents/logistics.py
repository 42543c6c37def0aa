"""
Logistics agents: parcel tracking, pickups, failed deliveries and address fixes.
"""

from datetime import date, timedelta

from callcenter.agents.base_agent import BaseAgent, make_reference
from callcenter.shared.errors import AgentEscalation, AgentValidationError, NeedMoreInfo

MOCK_SHIPMENT = {
    "status": "IN_TRANSIT",
    "current_location": "Distribution Center - Chicago, IL",
    "last_update": "2 hours ago",
    "estimated_delivery": "Tomorrow by 6 PM",
}

MAX_DELIVERY_ATTEMPTS = 3


class ParcelTrackingAgent(BaseAgent):
    required_fields = ("tracking_number",)
    sector = "logistics"
    agent_type = "TRACK_PARCEL"
    field_prompts = {"tracking_number": "What is your tracking number?"}

    async def handle(self) -> dict:
        s = MOCK_SHIPMENT
        return {
            "status": "success",
            "tracking_number": self.data["tracking_number"],
            "shipment_status": s["status"],
            "current_location": s["current_location"],
            "estimated_delivery": s["estimated_delivery"],
            "message": (
                f"Your package is {s['status']}. Current location: {s['current_location']}. "
                f"Estimated delivery: {s['estimated_delivery']}. Last update: {s['last_update']}."
            ),
        }


class PickupScheduleAgent(BaseAgent):
    required_fields = ("pickup_address", "preferred_time", "shipper_name")
    sector = "logistics"
    agent_type = "SCHEDULE_PICKUP"
    field_prompts = {
        "pickup_address": "What is the pickup address?",
        "preferred_time": "What time would you prefer for the pickup?",
        "shipper_name": "What is your company name or name?",
    }

    async def handle(self) -> dict:
        address = str(self.data["pickup_address"]).strip()
        if len(address) <= 5:
            raise AgentValidationError(
                "Address format unclear. Please provide street, city, and zip code.",
                field="pickup_address",
            )
        pickup_id = make_reference("PICKUP")
        shipper = self.data["shipper_name"]
        when = self.data["preferred_time"]
        return {
            "status": "success",
            "pickup_id": pickup_id,
            "pickup_address": address,
            "scheduled_time": when,
            "message": (
                f"Pickup confirmed for {shipper} at {address}. "
                f"Scheduled for {when}. Pickup ID: {pickup_id}"
            ),
        }


class DeliveryFailureAgent(BaseAgent):
    required_fields = ("tracking_number", "delivery_address")
    sector = "logistics"
    agent_type = "DELIVERY_FAILURE"
    field_prompts = {
        "tracking_number": "What is your tracking number?",
        "delivery_address": "What is the delivery address?",
    }

    async def handle(self) -> dict:
        attempts = int(self.data.get("attempts_made", 1))
        limit = int(self.data.get("delivery_attempt_limit", MAX_DELIVERY_ATTEMPTS))
        if attempts >= limit:
            raise AgentEscalation(
                "Maximum delivery attempts reached. Please contact customer support "
                "to arrange alternative delivery.",
                reason="MAX_ATTEMPTS_REACHED",
                attempts_made=attempts,
            )
        redelivery = (date.today() + timedelta(days=1)).isoformat()
        return {
            "status": "success",
            "tracking_number": self.data["tracking_number"],
            "attempts_made": attempts,
            "redelivery_date": redelivery,
            "message": (
                f"Redelivery scheduled. Your package will be delivered on {redelivery}. "
                f"We will send you a notification."
            ),
        }


class AddressAgent(BaseAgent):
    required_fields = ("tracking_number", "address_input")
    sector = "logistics"
    agent_type = "ADDRESS_UPDATE"
    field_prompts = {
        "tracking_number": "What is your tracking number?",
        "address_input": "What is the complete delivery address?",
    }

    @staticmethod
    def parse_address(raw: str) -> dict:
        parts = [p.strip() for p in raw.split(",")]
        return {
            "street": parts[0] if parts else "",
            "city": parts[1] if len(parts) > 1 else "",
            "state": parts[2] if len(parts) > 2 else "",
            "zip": parts[3] if len(parts) > 3 else "",
        }

    @staticmethod
    def missing_component(parsed: dict):
        if len(parsed["street"]) <= 3:
            return "street address"
        if not parsed["city"]:
            return "city"
        if not parsed["state"]:
            return "state"
        return None

    async def handle(self) -> dict:
        parsed = self.parse_address(str(self.data["address_input"]))
        missing = self.missing_component(parsed)
        if missing:
            raise NeedMoreInfo(
                f"Please clarify the {missing} for this delivery.",
                field="address_input",
                missing_component=missing,
            )
        formatted = f"{parsed['street']}, {parsed['city']}, {parsed['state']} {parsed['zip']}".strip()
        return {
            "status": "success",
            "tracking_number": self.data["tracking_number"],
            "formatted_address": formatted,
            "message": f"Address confirmed: {formatted}. Your package will be delivered to this address.",
        }


AGENTS = {
    "TrackingAgent": ParcelTrackingAgent,
    "PickupScheduleAgent": PickupScheduleAgent,
    "DeliveryFailureAgent": DeliveryFailureAgent,
    "AddressAgent": AddressAgent,
}
