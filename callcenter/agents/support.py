"""
Support desk agents: first-line troubleshooting, ticket creation, FAQ search and escalation.
"""

import re
from datetime import datetime, timezone

from callcenter.agents.base_agent import BaseAgent, make_reference
from callcenter.shared.errors import AgentEscalation, AgentValidationError

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

PRIORITIES = ("LOW", "MEDIUM", "HIGH", "CRITICAL")

RESPONSE_TIMES = {"CRITICAL": "15 minutes", "HIGH": "1 hour", "MEDIUM": "4 hours", "LOW": "24 hours"}

L1_FAQ = {
    "password_reset": {
        "category": "ACCOUNT_ACCESS",
        "answer": "To reset your password, click \"Forgot Password\" on the login page. You'll receive an email with reset instructions.",
    },
    "billing_issue": {
        "category": "BILLING",
        "answer": "For billing inquiries, please check your account dashboard under \"Billing History\" or contact our billing team.",
    },
    "login_problem": {
        "category": "ACCOUNT_ACCESS",
        "answer": "If you can't log in, ensure caps lock is off, and verify your email address is correct. Try resetting your password.",
    },
    "feature_request": {
        "category": "GENERAL_INQUIRY",
        "answer": "Thank you for your suggestion! Please submit feature requests through our feedback portal for our product team to review.",
    },
    "data_export": {
        "category": "DATA_MANAGEMENT",
        "answer": "You can export your data from Settings > Data Export. Select your preferred format (CSV, JSON) and download.",
    },
    "integration": {
        "category": "TECHNICAL",
        "answer": "Our API documentation is available at docs.company.com. For integration help, check our integration guides or contact technical support.",
    },
}

FAQ_ARTICLES = (
    {
        "id": "faq_001",
        "title": "How to Reset Your Password",
        "category": "Account Access",
        "keywords": ("password", "reset", "login", "access"),
        "content": "To reset your password, click \"Forgot Password\" on the login page. Enter your email and follow the instructions sent to your inbox.",
    },
    {
        "id": "faq_002",
        "title": "Understanding Your Invoice",
        "category": "Billing",
        "keywords": ("invoice", "billing", "charge", "payment"),
        "content": "Your invoice is available in Settings > Billing History. It includes a breakdown of all charges and dates.",
    },
    {
        "id": "faq_003",
        "title": "API Documentation",
        "category": "Technical",
        "keywords": ("api", "integration", "technical", "developer"),
        "content": "Our API documentation is available at docs.company.com with code examples in Python, JavaScript, and more.",
    },
    {
        "id": "faq_004",
        "title": "Exporting Your Data",
        "category": "Data Management",
        "keywords": ("export", "data", "download", "backup"),
        "content": "Navigate to Settings > Data Export to download your data in CSV or JSON format.",
    },
    {
        "id": "faq_005",
        "title": "Two-Factor Authentication Setup",
        "category": "Security",
        "keywords": ("2fa", "authentication", "security", "two-factor"),
        "content": "Enable 2FA in Settings > Security. You can use an authenticator app or receive codes via SMS.",
    },
)

ESCALATION_TEAMS = {
    "account_compromised": "Security",
    "payment_error": "Billing",
    "technical_issue": "Engineering",
    "data_loss": "Data Recovery",
    "integration_problem": "Technical Support",
    "fraud": "Fraud Prevention",
}

TEAM_SLAS = {
    "Security": "30 minutes",
    "Billing": "2 hours",
    "Engineering": "4 hours",
    "Data Recovery": "2 hours",
    "Technical Support": "1 hour",
    "Fraud Prevention": "15 minutes",
}


def _snake(text: str) -> str:
    """'I need a Password Reset' -> 'i_need_a_password_reset'."""
    return re.sub(r"[\s-]+", "_", text.strip().lower())


class L1SupportAgent(BaseAgent):
    """First-line support: answers known issues, hands the rest to L2."""

    required_fields = ("issue_description",)
    sector = "support"
    agent_type = "L1_SUPPORT"
    field_prompts = {
        "issue_description": "What issue are you experiencing? Please describe the problem you're facing.",
    }

    async def handle(self) -> dict:
        issue = str(self.data["issue_description"])
        normalized = _snake(issue)
        for key, entry in L1_FAQ.items():
            if key in normalized:
                return {
                    "status": "resolved",
                    "support_level": "L1",
                    "issue_type": entry["category"],
                    "solution": entry["answer"],
                    "ticket_id": make_reference("SUP"),
                    "satisfaction_survey": "Was this helpful? Please reply Yes or No",
                    "message": entry["answer"],
                }
        raise AgentEscalation(
            "Your issue requires specialized support. Creating ticket for L2 team...",
            reason="FAQ_NO_MATCH",
            issue_description=issue,
            support_level="L1",
            ticket_id=make_reference("SUP"),
        )


class TicketCreationAgent(BaseAgent):
    required_fields = ("customer_email", "issue_title", "priority")
    sector = "support"
    agent_type = "TICKET_CREATION"
    field_prompts = {
        "customer_email": "What is your email address for this support ticket?",
        "issue_title": "Please provide a brief title for your issue.",
        "priority": "What is the priority level? (LOW, MEDIUM, HIGH, CRITICAL)",
    }

    async def handle(self) -> dict:
        email = str(self.data["customer_email"]).strip()
        if not EMAIL_RE.match(email):
            raise AgentValidationError("Please provide a valid email address.", field="customer_email")
        priority = str(self.data["priority"]).strip().upper()
        if priority not in PRIORITIES:
            raise AgentValidationError("Priority must be LOW, MEDIUM, HIGH, or CRITICAL.", field="priority")

        ticket_id = make_reference("TKT")
        return {
            "status": "created",
            "ticket_id": ticket_id,
            "customer_email": email,
            "issue_title": self.data["issue_title"],
            "priority": priority,
            "created_at": datetime.now(timezone.utc).isoformat(),
            "estimated_response": RESPONSE_TIMES[priority],
            "message": (
                f"Support ticket {ticket_id} created successfully. "
                f"You will receive a confirmation email at {email}."
            ),
        }


class FAQLookupAgent(BaseAgent):
    required_fields = ("search_query",)
    sector = "support"
    agent_type = "FAQ_LOOKUP"
    field_prompts = {
        "search_query": "What would you like help with? (e.g., \"how to reset password\", \"billing issues\")",
    }

    @staticmethod
    def search(query: str) -> list[dict]:
        lowered = query.lower()
        return [
            {k: article[k] for k in ("id", "title", "category", "content")}
            for article in FAQ_ARTICLES
            if any(keyword in lowered for keyword in article["keywords"])
        ]

    async def handle(self) -> dict:
        query = str(self.data["search_query"])
        articles = self.search(query)
        if not articles:
            return {
                "status": "no_results",
                "search_query": query,
                "message": "No FAQ articles found matching your search. Please create a support ticket for assistance.",
                "next_action": "Would you like to create a support ticket?",
            }
        return {
            "status": "success",
            "search_query": query,
            "articles_found": len(articles),
            "articles": articles,
            "message": articles[0]["content"],
            "helpful_prompt": "Did you find the answer you were looking for?",
        }


class IssueEscalationAgent(BaseAgent):
    required_fields = ("ticket_id", "escalation_reason")
    sector = "support"
    agent_type = "ISSUE_ESCALATION"
    field_prompts = {
        "ticket_id": "Please provide your ticket ID (e.g., TKT_1234567890).",
        "escalation_reason": "Why does this issue need escalation? (e.g., \"Account compromised\", \"Payment error\", \"Technical issue\")",
    }

    @staticmethod
    def team_for(reason: str) -> str:
        normalized = _snake(reason)
        return next(
            (team for key, team in ESCALATION_TEAMS.items() if key in normalized),
            "General Support",
        )

    @staticmethod
    def priority_for(reason: str) -> str:
        lowered = reason.lower()
        if any(word in lowered for word in ("compromised", "fraud", "critical")):
            return "CRITICAL"
        if "error" in lowered or "issue" in lowered:
            return "HIGH"
        return "MEDIUM"

    async def handle(self) -> dict:
        reason = str(self.data["escalation_reason"])
        team = self.team_for(reason)
        return {
            "status": "escalated",
            "ticket_id": str(self.data["ticket_id"]).strip().upper(),
            "escalation_reason": reason,
            "escalated_to": team,
            "escalated_at": datetime.now(timezone.utc).isoformat(),
            "priority": self.priority_for(reason),
            "sla_time": TEAM_SLAS.get(team, "4 hours"),
            "message": f"Your issue has been escalated to {team} team. A specialist will contact you shortly.",
        }


AGENTS = {
    "L1SupportAgent": L1SupportAgent,
    "TicketCreationAgent": TicketCreationAgent,
    "FAQLookupAgent": FAQLookupAgent,
    "IssueEscalationAgent": IssueEscalationAgent,
}
