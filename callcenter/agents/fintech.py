"""
Fintech agents: balance enquiries, OTP-verified transactions and fraud reports.
"""

from callcenter.agents.base_agent import BaseAgent, make_reference
from callcenter.shared.errors import AgentEscalation, AgentValidationError

MOCK_BALANCE = {
    "balance": "$5,432.50",
    "available_balance": "$5,200.00",
    "pending_transactions": 2,
}

MOCK_OTP = "123456"
MAX_OTP_ATTEMPTS = 3

MOCK_TRANSACTION = {
    "amount": "$500.00",
    "recipient": "John Doe",
    "reference": "INV-2024-001",
}

FRAUD_SEVERITY = {
    "unauthorized_transaction": "MEDIUM",
    "card_compromise": "HIGH",
    "identity_theft": "CRITICAL",
    "phishing": "MEDIUM",
}


class BalanceCheckAgent(BaseAgent):
    required_fields = ("account_id",)
    sector = "fintech"
    agent_type = "CHECK_BALANCE"
    field_prompts = {
        "account_id": "What is your account ID or the last 4 digits of your account number?",
    }

    async def handle(self) -> dict:
        b = MOCK_BALANCE
        return {
            "status": "success",
            "account_id": self.data["account_id"],
            **b,
            "message": (
                f"Your current balance is {b['balance']}. Available balance: {b['available_balance']}. "
                f"You have {b['pending_transactions']} pending transaction(s)."
            ),
        }


class TransactionVerifyAgent(BaseAgent):
    """OTP check; failures accumulate across executions of the same instance."""

    required_fields = ("transaction_id", "otp")
    sector = "fintech"
    agent_type = "VERIFY_TRANSACTION"
    field_prompts = {
        "transaction_id": "What is your transaction ID?",
        "otp": "Please enter the OTP sent to your registered phone number.",
    }

    def __init__(self, call_id, initial_data=None):
        super().__init__(call_id, initial_data)
        self.failed_attempts = 0

    async def handle(self) -> dict:
        otp = str(self.data["otp"]).strip()
        if otp != MOCK_OTP:
            self.failed_attempts += 1
            # Clear the bad OTP so the next utterance has to supply a new one
            self.data.pop("otp", None)
            if self.failed_attempts >= MAX_OTP_ATTEMPTS:
                raise AgentEscalation(
                    "Too many failed OTP attempts. Transaction locked for security. Contact support.",
                    reason="OTP_FAILED_ATTEMPTS",
                    transaction_id=self.data["transaction_id"],
                )
            raise AgentValidationError(
                f"Invalid OTP. {MAX_OTP_ATTEMPTS - self.failed_attempts} attempts remaining.",
                field="otp",
            )
        t = MOCK_TRANSACTION
        return {
            "status": "success",
            "transaction_id": self.data["transaction_id"],
            "verified": True,
            **t,
            "message": (
                f"Transaction verified and approved. Amount: {t['amount']}. "
                f"Recipient: {t['recipient']}. Reference: {t['reference']}"
            ),
        }


class FraudReportAgent(BaseAgent):
    required_fields = ("fraud_type", "transaction_id")
    sector = "fintech"
    agent_type = "REPORT_FRAUD"
    field_prompts = {
        "fraud_type": "What type of fraud are you reporting?",
        "transaction_id": "Which transaction ID is affected?",
    }

    async def handle(self) -> dict:
        fraud_type = str(self.data["fraud_type"]).strip().lower()
        if fraud_type not in FRAUD_SEVERITY:
            raise AgentValidationError(
                "Invalid fraud type. Valid types: " + ", ".join(FRAUD_SEVERITY) + ".",
                field="fraud_type",
            )
        case_id = make_reference("FRAUD")
        return {
            "status": "success",
            "case_id": case_id,
            "fraud_type": fraud_type,
            "escalation_level": FRAUD_SEVERITY[fraud_type],
            "investigation_status": "INITIATED",
            "message": (
                f"Fraud report received and investigation initiated. Case ID: {case_id}. "
                f"Our team will investigate and contact you within 24 hours."
            ),
        }


AGENTS = {
    "BalanceCheckAgent": BalanceCheckAgent,
    "TransactionVerifyAgent": TransactionVerifyAgent,
    "FraudReportAgent": FraudReportAgent,
}
