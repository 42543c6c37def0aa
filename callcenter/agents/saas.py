"""
SaaS agents: onboarding guidance, billing questions, demo booking and feature FAQ.
"""

import re

from callcenter.agents.base_agent import BaseAgent, make_reference
from callcenter.shared.errors import AgentEscalation, AgentValidationError

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

ONBOARDING_STEPS = {
    "ACCOUNT_SETUP": {
        "title": "Account Setup",
        "instructions": "1. Verify your email 2. Set up your password 3. Configure timezone and language 4. Add profile picture",
        "duration": "5 minutes",
        "next_step": "Team Invitation",
    },
    "TEAM_INVITATION": {
        "title": "Team Invitation",
        "instructions": "1. Go to Settings > Team 2. Click \"Invite Team Members\" 3. Enter email addresses 4. Assign roles 5. Send invitations",
        "duration": "10 minutes",
        "next_step": "Integration",
    },
    "INTEGRATION": {
        "title": "Integration",
        "instructions": "1. Visit Integrations page 2. Browse available integrations 3. Connect your tools (Slack, GitHub, etc) 4. Test connection",
        "duration": "15 minutes",
        "next_step": "First Project",
    },
    "FIRST_PROJECT": {
        "title": "Create Your First Project",
        "instructions": "1. Click \"New Project\" 2. Name your project 3. Set project visibility 4. Add description 5. Invite team members",
        "duration": "10 minutes",
        "next_step": "API Setup",
    },
    "API_SETUP": {
        "title": "API Setup",
        "instructions": "1. Generate API key 2. Configure webhooks 3. Test API connection 4. Review rate limits 5. Implement in your app",
        "duration": "20 minutes",
        "next_step": "Complete!",
    },
}

BILLING_ACCOUNTS = {
    "ACC_001": {
        "customer_name": "Acme Corp",
        "current_plan": "Professional",
        "monthly_cost": "$99/month",
        "annual_cost": "$990/year",
        "billing_cycle": "Monthly",
        "next_billing_date": "2024-02-15",
        "payment_methods": ["Visa ending in 4242", "PayPal: acme@corp.com"],
        "seats_used": 15,
        "seats_available": 50,
        "features": ["Custom Integrations", "Advanced Analytics", "Priority Support"],
    },
    "ACC_002": {
        "customer_name": "Startup Inc",
        "current_plan": "Starter",
        "monthly_cost": "$29/month",
        "annual_cost": "$290/year",
        "billing_cycle": "Annual",
        "next_billing_date": "2024-12-20",
        "payment_methods": ["Visa ending in 1234"],
        "seats_used": 3,
        "seats_available": 5,
        "features": ["Basic Integrations", "Standard Support"],
    },
}

DEMO_SLOTS = (
    "Tomorrow 10:00 AM",
    "Tomorrow 2:00 PM",
    "Tomorrow 4:00 PM",
    "Next Tuesday 10:00 AM",
    "Next Tuesday 2:00 PM",
)

FEATURE_FAQ = {
    "automation": "Automate repetitive tasks using workflows. Set triggers and actions to streamline processes.",
    "reporting": "Create custom reports and dashboards to track KPIs. Export data in multiple formats.",
    "integration": "Connect with 100+ tools like Slack, GitHub, Salesforce, Jira, and more.",
    "security": "Enterprise-grade security with SSO, 2FA, encryption, and compliance certifications.",
    "collaboration": "Real-time collaboration tools for teams. Comments, mentions, and activity streams.",
}


def _step_key(step: str) -> str:
    return step.strip().upper().replace(" ", "_")


class OnboardingSupportAgent(BaseAgent):
    required_fields = ("user_id", "onboarding_step")
    sector = "saas"
    agent_type = "ONBOARDING"
    field_prompts = {
        "user_id": "What is your user ID or email address?",
        "onboarding_step": "Which step are you on? (Account Setup, Team Invitation, Integration, First Project, API Setup)",
    }

    async def handle(self) -> dict:
        guidance = ONBOARDING_STEPS.get(_step_key(str(self.data["onboarding_step"])))
        if guidance is None:
            raise AgentValidationError("Invalid onboarding step. Please try again.", field="onboarding_step")
        return {
            "status": "guidance_provided",
            "user_id": self.data["user_id"],
            "step_title": guidance["title"],
            "instructions": guidance["instructions"],
            "estimated_time": guidance["duration"],
            "next_step": guidance["next_step"],
            "message": f"Welcome! Let's get you started. {guidance['title']}: {guidance['instructions']}",
        }


class SaaSBillingAgent(BaseAgent):
    required_fields = ("account_id", "query_type")
    sector = "saas"
    agent_type = "BILLING_QUERY"
    field_prompts = {
        "account_id": "What is your account ID or email?",
        "query_type": "What billing question do you have? (Current Plan, Invoice, Upgrade, Refund, Discount)",
    }

    @staticmethod
    def answer(query_type: str, account: dict) -> dict:
        responses = {
            "CURRENT_PLAN": {
                "plan_name": account["current_plan"],
                "cost": account["monthly_cost"],
                "billing_cycle": account["billing_cycle"],
                "seats": f"{account['seats_used']}/{account['seats_available']}",
                "message": (
                    f"You are on the {account['current_plan']} plan at {account['monthly_cost']}, "
                    f"billed {account['billing_cycle'].lower()}."
                ),
            },
            "INVOICE": {
                "amount": account["monthly_cost"],
                "date": account["next_billing_date"],
                "message": "Your latest invoice has been sent to your email.",
            },
            "UPGRADE": {
                "available_plans": ["Professional ($99/month)", "Enterprise (Custom)"],
                "message": "Upgrade anytime to access more features.",
            },
            "REFUND": {
                "policy": "Full refund within 30 days of purchase or 14 days for monthly plans.",
                "message": "Refund requests are processed within 5-7 business days.",
            },
            "DISCOUNT": {
                "annual_discount": "15% off with annual billing",
                "message": "Check if you qualify for annual billing discount (15% off) or non-profit rates.",
            },
        }
        return responses.get(_step_key(query_type), responses["CURRENT_PLAN"])

    async def handle(self) -> dict:
        account_id = str(self.data["account_id"]).strip().upper()
        account = BILLING_ACCOUNTS.get(account_id)
        if account is None:
            raise AgentValidationError("Account not found.", field="account_id")
        info = self.answer(str(self.data["query_type"]), account)
        return {
            "status": "success",
            "account_id": account_id,
            "billing_info": info,
            "payment_methods": account["payment_methods"],
            "next_billing_date": account["next_billing_date"],
            "message": info["message"],
        }


class DemoSchedulingAgent(BaseAgent):
    required_fields = ("prospect_name", "prospect_email", "preferred_time")
    sector = "saas"
    agent_type = "SCHEDULE_DEMO"
    field_prompts = {
        "prospect_name": "What is your name?",
        "prospect_email": "What is your email address?",
        "preferred_time": "When would you prefer the demo? (e.g., Tomorrow 2 PM, Next Tuesday 10 AM)",
    }

    @staticmethod
    def find_slot(preferred: str) -> str:
        wanted = preferred.lower()
        return next((s for s in DEMO_SLOTS if wanted in s.lower()), DEMO_SLOTS[0])

    async def handle(self) -> dict:
        if not EMAIL_RE.match(str(self.data["prospect_email"])):
            raise AgentValidationError("Please provide a valid email address.", field="prospect_email")
        slot = self.find_slot(str(self.data["preferred_time"]))
        demo_id = make_reference("DEMO")
        return {
            "status": "scheduled",
            "demo_id": demo_id,
            "prospect_name": self.data["prospect_name"],
            "scheduled_time": slot,
            "duration": "30 minutes",
            "message": f"Demo scheduled for {slot}. Check your email for the meeting link and dial-in details.",
        }


class FeatureFAQAgent(BaseAgent):
    required_fields = ("feature_question",)
    sector = "saas"
    agent_type = "FEATURE_QUESTION"
    field_prompts = {
        "feature_question": "What feature would you like to know about? (Automation, Reporting, Integrations, Security, etc.)",
    }

    async def handle(self) -> dict:
        question = str(self.data["feature_question"])
        lowered = question.lower()
        for feature, description in FEATURE_FAQ.items():
            if feature in lowered:
                return {
                    "status": "answered",
                    "feature": feature,
                    "question": question,
                    "message": description,
                }
        raise AgentEscalation(
            "Your question about features requires expert guidance. Our product specialist will contact you.",
            reason="FEATURE_EXPERT_REQUIRED",
            question=question,
            contact_team="Product Support",
        )


AGENTS = {
    "OnboardingSupportAgent": OnboardingSupportAgent,
    "BillingQueryAgent": SaaSBillingAgent,
    "DemoSchedulingAgent": DemoSchedulingAgent,
    "FeatureFAQAgent": FeatureFAQAgent,
}
