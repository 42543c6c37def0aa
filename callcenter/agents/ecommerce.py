"""
E-commerce agents (the legacy/default registry).

Order data is a fixed mock dataset; store integrations are out of scope.
Return, refund and cancellation policy values arrive in the agent's data
from the tenant's client record, with the platform defaults as fallback.
"""

import re

from callcenter.agents.base_agent import BaseAgent, make_reference
from callcenter.shared.constants import (
    DEFAULT_CANCEL_WINDOW_HOURS,
    DEFAULT_REFUND_AUTO_THRESHOLD,
    DEFAULT_RETURN_WINDOW_DAYS,
)
from callcenter.shared.errors import AgentEscalation, AgentValidationError

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MOCK_ORDERS = {
    "1001": {
        "status": "DELIVERED", "amount": 1499, "payment_method": "PREPAID",
        "payment_status": "CAPTURED", "hours_since_order": 120,
        "days_since_delivery": 3, "items": ["Wireless Earbuds"],
        "courier": "Delhivery", "awb": "DLV784512",
    },
    "1002": {
        "status": "SHIPPED", "amount": 2599, "payment_method": "PREPAID",
        "payment_status": "CAPTURED", "hours_since_order": 30,
        "days_since_delivery": None, "items": ["Smart Watch"],
        "courier": "Blue Dart", "awb": "BD556120", "eta": "Thursday",
        "location": "Mumbai hub",
    },
    "1003": {
        "status": "PROCESSING", "amount": 799, "payment_method": "COD",
        "payment_status": "PENDING", "hours_since_order": 2,
        "days_since_delivery": None, "items": ["Phone Case", "Screen Guard"],
    },
    "1004": {
        "status": "DELIVERED", "amount": 4999, "payment_method": "PREPAID",
        "payment_status": "CAPTURED", "hours_since_order": 600,
        "days_since_delivery": 20, "items": ["Bluetooth Speaker"],
        "courier": "Ekart", "awb": "EK99120",
    },
    "1005": {
        "status": "PAYMENT_FAILED", "amount": 3299, "payment_method": "PREPAID",
        "payment_status": "FAILED_DEBITED", "hours_since_order": 5,
        "days_since_delivery": None, "items": ["Running Shoes"],
    },
}

MOCK_PRODUCTS = {
    "wireless earbuds": {"price": "₹2,499", "in_stock": True, "warranty": "1 year"},
    "smart watch": {"price": "₹3,999", "in_stock": True, "warranty": "1 year"},
    "bluetooth speaker": {"price": "₹4,999", "in_stock": False, "warranty": "6 months"},
    "phone case": {"price": "₹499", "in_stock": True, "warranty": "none"},
}

_STATUS_TEXT = {
    "DELIVERED": "delivered",
    "SHIPPED": "shipped and on its way",
    "PROCESSING": "being packed and will ship soon",
    "PAYMENT_FAILED": "on hold because the payment did not go through",
}


def _money(amount) -> str:
    return f"₹{amount:,.0f}"


class EcommerceAgent(BaseAgent):
    """Shared order lookup for e-commerce agents."""

    sector = "ecommerce"
    field_prompts = {
        "order_id": "Could you please tell me your order number?",
    }

    def get_order(self) -> dict:
        order_id = str(self.data["order_id"]).strip().lstrip("#")
        order = MOCK_ORDERS.get(order_id)
        if order is None:
            raise AgentValidationError(
                f"We could not find order #{order_id}. Please check the order number.",
                field="order_id",
            )
        return {"order_id": order_id, **order}

    def policy(self, key: str, default):
        value = self.data.get(key)
        return default if value is None else value


class OrderLookupAgent(EcommerceAgent):
    required_fields = ("order_id",)
    agent_type = "ORDER_LOOKUP"

    async def handle(self) -> dict:
        order = self.get_order()
        message = f"Your order #{order['order_id']} is {_STATUS_TEXT.get(order['status'], order['status'].lower())}."
        if order.get("eta"):
            message += f" Expected delivery: {order['eta']}."
        return {
            "status": "success",
            "order_id": order["order_id"],
            "order_status": order["status"],
            "items": order["items"],
            "amount": _money(order["amount"]),
            "message": message,
        }


class ReturnAgent(EcommerceAgent):
    required_fields = ("order_id", "reason")
    agent_type = "RETURN_REQUEST"
    field_prompts = {
        **EcommerceAgent.field_prompts,
        "reason": "Why would you like to return the item?",
    }

    async def handle(self) -> dict:
        order = self.get_order()
        if order["status"] != "DELIVERED":
            raise AgentValidationError(
                f"Order #{order['order_id']} has not been delivered yet, so it cannot be returned.",
                field="order_id",
            )
        window = int(self.policy("return_window_days", DEFAULT_RETURN_WINDOW_DAYS))
        if order["days_since_delivery"] > window:
            raise AgentValidationError(
                f"Order #{order['order_id']} was delivered {order['days_since_delivery']} days ago, "
                f"outside the {window}-day return window.",
                field="order_id",
            )
        return_id = make_reference("RETURN")
        return {
            "status": "success",
            "return_id": return_id,
            "order_id": order["order_id"],
            "reason": self.data["reason"],
            "message": (
                f"Return request {return_id} created for order #{order['order_id']}. "
                f"Our courier partner will pick up the item within 2-3 business days."
            ),
        }


class RefundAgent(EcommerceAgent):
    required_fields = ("order_id",)
    agent_type = "REFUND"

    async def handle(self) -> dict:
        order = self.get_order()
        threshold = float(self.policy("refund_auto_threshold", DEFAULT_REFUND_AUTO_THRESHOLD))
        if order["amount"] > threshold:
            raise AgentEscalation(
                f"Refunds above {_money(threshold)} need approval from our team. "
                f"A specialist will call you back shortly.",
                reason="REFUND_APPROVAL_REQUIRED",
                order_id=order["order_id"],
                amount=order["amount"],
            )
        return {
            "status": "success",
            "refund_id": make_reference("REFUND"),
            "order_id": order["order_id"],
            "amount": _money(order["amount"]),
            "message": "Refund request processed. Amount will be credited in 5-7 business days.",
        }


class CancelOrderAgent(EcommerceAgent):
    required_fields = ("order_id",)
    agent_type = "CANCEL_ORDER"

    async def handle(self) -> dict:
        order = self.get_order()
        if order["status"] in ("SHIPPED", "DELIVERED"):
            raise AgentEscalation(
                f"Order #{order['order_id']} has already been {order['status'].lower()}. "
                f"Let me connect you with someone who can help.",
                reason="ALREADY_SHIPPED",
                order_id=order["order_id"],
            )
        window = int(self.policy("cancel_window_hours", DEFAULT_CANCEL_WINDOW_HOURS))
        if order["hours_since_order"] > window:
            raise AgentValidationError(
                f"Orders can only be cancelled within {window} hours of purchase.",
                field="order_id",
            )
        return {
            "status": "success",
            "order_id": order["order_id"],
            "cancellation_id": make_reference("CANCEL"),
            "message": f"Order #{order['order_id']} has been cancelled. Any payment made will be refunded.",
        }


class OrderTrackingAgent(EcommerceAgent):
    required_fields = ("order_id",)
    agent_type = "TRACKING"

    async def handle(self) -> dict:
        order = self.get_order()
        if not order.get("awb"):
            raise AgentValidationError(
                f"Order #{order['order_id']} has not shipped yet, so there is no tracking number.",
                field="order_id",
            )
        location = order.get("location", "the destination city")
        return {
            "status": "success",
            "order_id": order["order_id"],
            "courier": order["courier"],
            "tracking_number": order["awb"],
            "message": (
                f"Your package is with {order['courier']} (AWB {order['awb']}), "
                f"last scanned at {location}."
            ),
        }


class ComplaintAgent(EcommerceAgent):
    required_fields = ("complaint_details",)
    agent_type = "COMPLAINT"
    field_prompts = {"complaint_details": "I'm sorry to hear that. Could you describe the problem?"}

    async def handle(self) -> dict:
        ticket_id = make_reference("TICKET")
        raise AgentEscalation(
            f"I've logged your complaint as ticket {ticket_id}. A senior executive will take it from here.",
            reason="CUSTOMER_COMPLAINT",
            ticket_id=ticket_id,
            details=self.data["complaint_details"],
        )


class ProductInquiryAgent(EcommerceAgent):
    required_fields = ("product_name",)
    agent_type = "PRODUCT_INQUIRY"
    field_prompts = {"product_name": "Which product would you like to know about?"}

    async def handle(self) -> dict:
        query = str(self.data["product_name"]).lower()
        for name, product in MOCK_PRODUCTS.items():
            if name in query or query in name:
                availability = "in stock" if product["in_stock"] else "currently out of stock"
                return {
                    "status": "success",
                    "product": name,
                    **product,
                    "message": (
                        f"The {name} is priced at {product['price']} and is {availability}. "
                        f"Warranty: {product['warranty']}."
                    ),
                }
        raise AgentValidationError(
            "I couldn't find that product. Could you tell me the exact product name?",
            field="product_name",
        )


class PaymentIssueAgent(EcommerceAgent):
    required_fields = ("order_id",)
    agent_type = "PAYMENT_ISSUE"

    async def handle(self) -> dict:
        order = self.get_order()
        if order["payment_status"] == "FAILED_DEBITED":
            message = (
                f"The payment for order #{order['order_id']} failed but your account was debited. "
                f"{_money(order['amount'])} will be auto-reversed within 5-7 business days."
            )
        elif order["payment_method"] == "COD":
            message = f"Order #{order['order_id']} is cash on delivery; no online payment was taken."
        else:
            message = f"Payment of {_money(order['amount'])} for order #{order['order_id']} was received successfully."
        return {
            "status": "success",
            "order_id": order["order_id"],
            "payment_status": order["payment_status"],
            "message": message,
        }


class AddressChangeAgent(EcommerceAgent):
    required_fields = ("order_id", "new_address")
    agent_type = "ADDRESS_CHANGE"
    field_prompts = {
        **EcommerceAgent.field_prompts,
        "new_address": "What is the new delivery address, including the pincode?",
    }

    async def handle(self) -> dict:
        order = self.get_order()
        if order["status"] in ("SHIPPED", "DELIVERED"):
            raise AgentEscalation(
                "The address can no longer be changed from here because the order has shipped.",
                reason="ADDRESS_LOCKED",
                order_id=order["order_id"],
            )
        new_address = str(self.data["new_address"]).strip()
        if len(new_address) < 10:
            raise AgentValidationError(
                "That address looks incomplete. Please include house number, street, city and pincode.",
                field="new_address",
            )
        return {
            "status": "success",
            "order_id": order["order_id"],
            "new_address": new_address,
            "message": f"Delivery address for order #{order['order_id']} updated to {new_address}.",
        }


class ExchangeAgent(EcommerceAgent):
    required_fields = ("order_id", "exchange_reason")
    agent_type = "EXCHANGE"
    field_prompts = {
        **EcommerceAgent.field_prompts,
        "exchange_reason": "What would you like to exchange the item for, and why?",
    }

    async def handle(self) -> dict:
        order = self.get_order()
        window = int(self.policy("return_window_days", DEFAULT_RETURN_WINDOW_DAYS))
        if order["status"] != "DELIVERED" or order["days_since_delivery"] > window:
            raise AgentValidationError(
                f"Order #{order['order_id']} is not eligible for exchange. "
                f"Exchanges are accepted within {window} days of delivery.",
                field="order_id",
            )
        exchange_id = make_reference("EXCHANGE")
        return {
            "status": "success",
            "exchange_id": exchange_id,
            "order_id": order["order_id"],
            "message": f"Exchange {exchange_id} booked. The replacement ships once we pick up the original item.",
        }


class CODAgent(EcommerceAgent):
    required_fields = ("order_id",)
    agent_type = "COD_ISSUE"

    async def handle(self) -> dict:
        order = self.get_order()
        if order["payment_method"] != "COD":
            raise AgentValidationError(
                f"Order #{order['order_id']} is prepaid, so nothing is due on delivery.",
                field="order_id",
            )
        return {
            "status": "success",
            "order_id": order["order_id"],
            "amount_due": _money(order["amount"]),
            "message": (
                f"Please keep {_money(order['amount'])} ready for order #{order['order_id']}. "
                f"You can pay the delivery partner by cash or UPI."
            ),
        }


class InvoiceAgent(EcommerceAgent):
    required_fields = ("order_id",)
    agent_type = "INVOICE"

    async def handle(self) -> dict:
        order = self.get_order()
        invoice_number = f"INV-{order['order_id']}"
        return {
            "status": "success",
            "order_id": order["order_id"],
            "invoice_number": invoice_number,
            "message": f"Invoice {invoice_number} has been sent to your registered email address.",
        }


class RegistrationAgent(EcommerceAgent):
    required_fields = ("customer_name", "email")
    agent_type = "REGISTRATION"
    field_prompts = {
        "customer_name": "May I have your full name?",
        "email": "What email address should we register?",
    }

    async def handle(self) -> dict:
        if not EMAIL_RE.match(str(self.data["email"])):
            raise AgentValidationError("Please provide a valid email address.", field="email")
        customer_id = make_reference("CUST")
        return {
            "status": "success",
            "customer_id": customer_id,
            "customer_name": self.data["customer_name"],
            "email": self.data["email"],
            "message": f"Welcome, {self.data['customer_name']}! Your account has been created.",
        }


class TechnicalSupportAgent(EcommerceAgent):
    required_fields = ("issue_description",)
    agent_type = "TECHNICAL_SUPPORT"
    field_prompts = {"issue_description": "What problem are you facing with the website or app?"}

    TROUBLESHOOTING = {
        "password": "Tap 'Forgot password' on the login screen and follow the link we email you.",
        "login": "Tap 'Forgot password' on the login screen and follow the link we email you.",
        "otp": "OTPs can take up to 2 minutes. Check that your registered number is correct, then request a new one.",
        "app": "Please update the app to the latest version and restart your phone.",
    }

    async def handle(self) -> dict:
        issue = str(self.data["issue_description"]).lower()
        for keyword, steps in self.TROUBLESHOOTING.items():
            if keyword in issue:
                return {
                    "status": "success",
                    "issue": self.data["issue_description"],
                    "message": steps,
                }
        raise AgentEscalation(
            "Let me connect you with our technical team for this issue.",
            reason="TECHNICAL_ESCALATION",
            issue=self.data["issue_description"],
        )


AGENTS = {
    "OrderLookupAgent": OrderLookupAgent,
    "ReturnAgent": ReturnAgent,
    "RefundAgent": RefundAgent,
    "CancelOrderAgent": CancelOrderAgent,
    "TrackingAgent": OrderTrackingAgent,
    "ComplaintAgent": ComplaintAgent,
    "ProductInquiryAgent": ProductInquiryAgent,
    "PaymentIssueAgent": PaymentIssueAgent,
    "AddressChangeAgent": AddressChangeAgent,
    "ExchangeAgent": ExchangeAgent,
    "CODAgent": CODAgent,
    "InvoiceAgent": InvoiceAgent,
    "RegistrationAgent": RegistrationAgent,
    "TechnicalSupportAgent": TechnicalSupportAgent,
}
