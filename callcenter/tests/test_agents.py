"""
Tests for the sector agents: required fields, validation, escalation and
the single event each execute() emits.
"""

import pytest

from callcenter.agents import (
    ecommerce, education, fintech, government, healthcare, logistics, realestate, saas, support, telecom, travel,
)
from callcenter.agents.base_agent import BaseAgent, make_reference
from callcenter.shared.models import AgentEventType, AgentState


async def _run(agent_cls, **data):
    agent = agent_cls("call-1", data)
    event = await agent.execute()
    return agent, event


# ═══════════════════════════════════════════════════════════════
# BASE AGENT
# ═══════════════════════════════════════════════════════════════

class _EchoAgent(BaseAgent):
    required_fields = ("name",)
    agent_type = "ECHO"

    async def handle(self):
        return {"status": "success", "echo": self.data["name"]}


class _BrokenAgent(BaseAgent):
    agent_type = "BROKEN"

    async def handle(self):
        raise RuntimeError("backend exploded")


@pytest.mark.asyncio
class TestBaseAgent:
    async def test_missing_field_asks_for_it(self):
        agent, event = await _run(_EchoAgent)
        assert event.event_type == AgentEventType.NEED_INFO
        assert event.payload["field"] == "name"
        assert event.payload["message"] == "Could you please provide your name?"
        assert agent.state == AgentState.WAITING_FOR_INFO

    async def test_blank_string_counts_as_missing(self):
        agent = _EchoAgent("c", {"name": "   "})
        assert agent.missing_fields() == ["name"]

    async def test_complete(self):
        agent, event = await _run(_EchoAgent, name="Ravi")
        assert event.event_type == AgentEventType.COMPLETE
        assert event.is_terminal
        assert agent.result == {"status": "success", "echo": "Ravi"}
        assert agent.state == AgentState.COMPLETED

    async def test_unexpected_exception_becomes_error_event(self):
        agent, event = await _run(_BrokenAgent)
        assert event.event_type == AgentEventType.ERROR
        assert event.payload["message"] == "backend exploded"
        assert agent.state == AgentState.ERROR
        assert not event.is_terminal

    async def test_update_data_ignores_none(self):
        agent = _EchoAgent("c", {"name": "A"})
        agent.update_data({"name": None, "extra": 1})
        assert agent.data == {"name": "A", "extra": 1}

    async def test_listeners_receive_events(self):
        seen = []
        agent = _EchoAgent("c", {"name": "A"})
        agent.on(AgentEventType.COMPLETE, seen.append)
        event = await agent.execute()
        assert seen == [event]

    async def test_failing_listener_does_not_break_execution(self):
        def bad_listener(_event):
            raise ValueError("listener bug")

        agent = _EchoAgent("c", {"name": "A"})
        agent.on(AgentEventType.COMPLETE, bad_listener)
        event = await agent.execute()
        assert event.event_type == AgentEventType.COMPLETE

    async def test_event_to_dict(self):
        _, event = await _run(_EchoAgent, name="A")
        data = event.to_dict()
        assert data["type"] == "complete"
        assert data["call_id"] == "call-1"
        assert data["agent_type"] == "ECHO"
        assert "timestamp" in data

    async def test_cancel(self):
        agent = _EchoAgent("c")
        agent.cancel()
        assert agent.state == AgentState.CANCELLED

    async def test_make_reference(self):
        assert make_reference("APPT").startswith("APPT_")


# ═══════════════════════════════════════════════════════════════
# E-COMMERCE
# ═══════════════════════════════════════════════════════════════

@pytest.mark.asyncio
class TestEcommerceAgents:
    async def test_order_lookup(self):
        _, event = await _run(ecommerce.OrderLookupAgent, order_id="#1002")
        assert event.event_type == AgentEventType.COMPLETE
        assert event.payload["order_status"] == "SHIPPED"
        assert "Thursday" in event.payload["message"]

    async def test_unknown_order_is_validation_error(self):
        _, event = await _run(ecommerce.OrderLookupAgent, order_id="9999")
        assert event.event_type == AgentEventType.ERROR
        assert event.payload["field"] == "order_id"

    async def test_return_within_window(self):
        _, event = await _run(ecommerce.ReturnAgent, order_id="1001", reason="damaged")
        assert event.event_type == AgentEventType.COMPLETE
        assert event.payload["return_id"].startswith("RETURN_")

    async def test_return_outside_window(self):
        _, event = await _run(ecommerce.ReturnAgent, order_id="1004", reason="changed mind")
        assert event.event_type == AgentEventType.ERROR
        assert "14-day" in event.payload["message"]

    async def test_return_window_follows_client_policy(self):
        _, event = await _run(
            ecommerce.ReturnAgent, order_id="1004", reason="changed mind", return_window_days=30,
        )
        assert event.event_type == AgentEventType.COMPLETE

    async def test_return_of_undelivered_order(self):
        _, event = await _run(ecommerce.ReturnAgent, order_id="1002", reason="late")
        assert event.event_type == AgentEventType.ERROR

    async def test_refund_under_threshold(self):
        _, event = await _run(ecommerce.RefundAgent, order_id="1001")
        assert event.event_type == AgentEventType.COMPLETE
        assert event.payload["amount"] == "₹1,499"

    async def test_refund_over_threshold_escalates(self):
        agent, event = await _run(ecommerce.RefundAgent, order_id="1004")
        assert event.event_type == AgentEventType.NEED_ESCALATION
        assert event.payload["reason"] == "REFUND_APPROVAL_REQUIRED"
        assert agent.state == AgentState.ESCALATED

    async def test_refund_threshold_from_policy(self):
        _, event = await _run(ecommerce.RefundAgent, order_id="1004", refund_auto_threshold=10000)
        assert event.event_type == AgentEventType.COMPLETE

    async def test_cancel_processing_order(self):
        _, event = await _run(ecommerce.CancelOrderAgent, order_id="1003")
        assert event.event_type == AgentEventType.COMPLETE

    async def test_cancel_shipped_order_escalates(self):
        _, event = await _run(ecommerce.CancelOrderAgent, order_id="1002")
        assert event.event_type == AgentEventType.NEED_ESCALATION
        assert event.payload["reason"] == "ALREADY_SHIPPED"

    async def test_cancel_after_window(self):
        _, event = await _run(ecommerce.CancelOrderAgent, order_id="1005", cancel_window_hours=4)
        assert event.event_type == AgentEventType.ERROR

    async def test_tracking_needs_shipment(self):
        _, event = await _run(ecommerce.OrderTrackingAgent, order_id="1003")
        assert event.event_type == AgentEventType.ERROR
        _, event = await _run(ecommerce.OrderTrackingAgent, order_id="1002")
        assert event.payload["tracking_number"] == "BD556120"

    async def test_complaint_always_escalates(self):
        _, event = await _run(ecommerce.ComplaintAgent, complaint_details="late delivery")
        assert event.event_type == AgentEventType.NEED_ESCALATION
        assert event.payload["ticket_id"].startswith("TICKET_")

    async def test_product_inquiry(self):
        _, event = await _run(ecommerce.ProductInquiryAgent, product_name="Bluetooth Speaker")
        assert event.event_type == AgentEventType.COMPLETE
        assert "out of stock" in event.payload["message"]

    async def test_payment_failed_debited(self):
        _, event = await _run(ecommerce.PaymentIssueAgent, order_id="1005")
        assert "auto-reversed" in event.payload["message"]

    async def test_address_change_too_short(self):
        _, event = await _run(ecommerce.AddressChangeAgent, order_id="1003", new_address="Pune")
        assert event.event_type == AgentEventType.ERROR
        assert event.payload["field"] == "new_address"

    async def test_cod_on_prepaid_order(self):
        _, event = await _run(ecommerce.CODAgent, order_id="1001")
        assert event.event_type == AgentEventType.ERROR

    async def test_registration_validates_email(self):
        _, event = await _run(ecommerce.RegistrationAgent, customer_name="Ravi", email="not-an-email")
        assert event.payload["field"] == "email"

    async def test_technical_support_known_issue(self):
        _, event = await _run(ecommerce.TechnicalSupportAgent, issue_description="OTP not arriving")
        assert event.event_type == AgentEventType.COMPLETE

    async def test_technical_support_unknown_issue_escalates(self):
        _, event = await _run(ecommerce.TechnicalSupportAgent, issue_description="checkout page is blank")
        assert event.event_type == AgentEventType.NEED_ESCALATION


# ═══════════════════════════════════════════════════════════════
# HEALTHCARE
# ═══════════════════════════════════════════════════════════════

@pytest.mark.asyncio
class TestHealthcareAgents:
    async def test_booking_asks_for_name_first(self):
        _, event = await _run(healthcare.AppointmentBookingAgent)
        assert event.payload["field"] == "patient_name"
        assert event.payload["missing_fields"] == ["patient_name", "preferred_time"]

    async def test_booking_confirms(self):
        _, event = await _run(
            healthcare.AppointmentBookingAgent, patient_name="Meera", preferred_time="2 PM tomorrow",
        )
        assert event.event_type == AgentEventType.COMPLETE
        assert event.payload["appointment_id"].startswith("APPT_")

    async def test_refill_decrements(self):
        _, event = await _run(healthcare.PrescriptionRefillAgent, patient_id="P1", prescription_id="RX9")
        assert event.payload["refills_remaining"] == 2

    async def test_no_refills_left_escalates(self):
        _, event = await _run(
            healthcare.PrescriptionRefillAgent, patient_id="P1", prescription_id="RX9", refills_remaining=0,
        )
        assert event.event_type == AgentEventType.NEED_ESCALATION

    @pytest.mark.parametrize("symptoms,urgency", [
        ("sudden chest pain", "CRITICAL"),
        ("high fever since morning", "HIGH"),
        ("mild headache", "MEDIUM"),
    ])
    async def test_triage_urgency(self, symptoms, urgency):
        assert healthcare.TriageAgent.assess_urgency(symptoms) == urgency

    async def test_urgent_triage_escalates(self):
        _, event = await _run(healthcare.TriageAgent, symptoms="difficulty breathing")
        assert event.event_type == AgentEventType.NEED_ESCALATION
        assert event.payload["urgency"] == "CRITICAL"

    async def test_mild_triage_completes(self):
        _, event = await _run(healthcare.TriageAgent, symptoms="mild headache")
        assert event.event_type == AgentEventType.COMPLETE
        assert event.payload["urgency"] == "MEDIUM"

    async def test_patient_info_faq(self):
        _, event = await _run(healthcare.PatientInfoAgent, query="what are your clinic hours?")
        assert event.payload["topic"] == "hours"


# ═══════════════════════════════════════════════════════════════
# REAL ESTATE / LOGISTICS
# ═══════════════════════════════════════════════════════════════

@pytest.mark.asyncio
class TestRealEstateAgents:
    async def test_property_inquiry(self):
        _, event = await _run(realestate.PropertyInquiryAgent, property_id="42")
        assert event.payload["price"] == "$450,000"

    async def test_showing_uses_configured_duration(self):
        _, event = await _run(
            realestate.ShowingScheduleAgent,
            property_id="42", preferred_time="Saturday 11 AM", buyer_name="Kim", showing_duration_mins=45,
        )
        assert event.payload["duration_mins"] == 45

    async def test_lead_capture_rejects_bad_phone(self):
        _, event = await _run(
            realestate.LeadCaptureAgent, buyer_name="Kim", buyer_phone="12345", property_interest="2BHK",
        )
        assert event.event_type == AgentEventType.ERROR
        assert event.payload["field"] == "buyer_phone"


@pytest.mark.asyncio
class TestLogisticsAgents:
    async def test_tracking(self):
        _, event = await _run(logistics.ParcelTrackingAgent, tracking_number="AWB1")
        assert event.payload["shipment_status"] == "IN_TRANSIT"

    async def test_delivery_failure_limit(self):
        _, event = await _run(
            logistics.DeliveryFailureAgent, tracking_number="T1", delivery_address="x", attempts_made=3,
        )
        assert event.event_type == AgentEventType.NEED_ESCALATION

    async def test_delivery_failure_reschedules(self):
        _, event = await _run(logistics.DeliveryFailureAgent, tracking_number="T1", delivery_address="x")
        assert event.event_type == AgentEventType.COMPLETE
        assert "redelivery_date" in event.payload

    async def test_address_missing_city_needs_info(self):
        agent, event = await _run(logistics.AddressAgent, tracking_number="T1", address_input="221B Baker Street")
        assert event.event_type == AgentEventType.NEED_INFO
        assert event.payload["missing_component"] == "city"
        assert agent.state == AgentState.WAITING_FOR_INFO

    async def test_address_complete(self):
        _, event = await _run(
            logistics.AddressAgent, tracking_number="T1", address_input="221B Baker Street, London, LDN, NW1",
        )
        assert event.payload["formatted_address"] == "221B Baker Street, London, LDN NW1"


# ═══════════════════════════════════════════════════════════════
# FINTECH
# ═══════════════════════════════════════════════════════════════

@pytest.mark.asyncio
class TestFintechAgents:
    async def test_balance(self):
        _, event = await _run(fintech.BalanceCheckAgent, account_id="4321")
        assert event.payload["balance"] == "$5,432.50"

    async def test_correct_otp(self):
        _, event = await _run(fintech.TransactionVerifyAgent, transaction_id="TXN1", otp="123456")
        assert event.event_type == AgentEventType.COMPLETE
        assert event.payload["verified"] is True

    async def test_otp_failures_accumulate_then_escalate(self):
        agent = fintech.TransactionVerifyAgent("c", {"transaction_id": "TXN1", "otp": "000000"})
        event = await agent.execute()
        assert event.event_type == AgentEventType.ERROR
        assert "2 attempts remaining" in event.payload["message"]
        assert "otp" not in agent.data

        agent.update_data({"otp": "111111"})
        event = await agent.execute()
        assert "1 attempts remaining" in event.payload["message"]

        agent.update_data({"otp": "222222"})
        event = await agent.execute()
        assert event.event_type == AgentEventType.NEED_ESCALATION
        assert event.payload["reason"] == "OTP_FAILED_ATTEMPTS"

    async def test_fraud_report_severity(self):
        _, event = await _run(fintech.FraudReportAgent, fraud_type="Identity_Theft", transaction_id="T9")
        assert event.payload["escalation_level"] == "CRITICAL"

    async def test_fraud_report_invalid_type(self):
        _, event = await _run(fintech.FraudReportAgent, fraud_type="aliens", transaction_id="T9")
        assert event.event_type == AgentEventType.ERROR


# ═══════════════════════════════════════════════════════════════
# SAAS / TELECOM
# ═══════════════════════════════════════════════════════════════

@pytest.mark.asyncio
class TestSaaSAgents:
    async def test_onboarding_step(self):
        _, event = await _run(saas.OnboardingSupportAgent, user_id="u1", onboarding_step="team invitation")
        assert event.payload["next_step"] == "Integration"

    async def test_onboarding_unknown_step(self):
        _, event = await _run(saas.OnboardingSupportAgent, user_id="u1", onboarding_step="lunch")
        assert event.event_type == AgentEventType.ERROR

    async def test_billing_current_plan(self):
        _, event = await _run(saas.SaaSBillingAgent, account_id="acc_001", query_type="Current Plan")
        assert event.payload["billing_info"]["plan_name"] == "Professional"

    async def test_billing_unknown_account(self):
        _, event = await _run(saas.SaaSBillingAgent, account_id="ACC_999", query_type="invoice")
        assert event.event_type == AgentEventType.ERROR

    async def test_demo_slot_matching(self):
        assert saas.DemoSchedulingAgent.find_slot("next tuesday") == "Next Tuesday 10:00 AM"
        assert saas.DemoSchedulingAgent.find_slot("whenever") == "Tomorrow 10:00 AM"

    async def test_feature_faq_unknown_escalates(self):
        _, event = await _run(saas.FeatureFAQAgent, feature_question="can it make coffee?")
        assert event.event_type == AgentEventType.NEED_ESCALATION


@pytest.mark.asyncio
class TestTelecomAgents:
    async def test_active_outage(self):
        _, event = await _run(telecom.OutageNotificationAgent, service_type="internet", location_zip="90210")
        assert event.payload["status"] == "outage_active"

    async def test_no_outage(self):
        _, event = await _run(telecom.OutageNotificationAgent, service_type="Mobile", location_zip="10001")
        assert event.payload["service_status"] == "OPERATIONAL"

    async def test_billing_breakdown(self):
        _, event = await _run(telecom.TelecomBillingAgent, account_number="555-123-4567", query_type="breakdown")
        assert event.payload["query_type"] == "BREAKDOWN"
        assert "Internet Service" in event.payload["message"]

    async def test_billing_bad_account_format(self):
        _, event = await _run(telecom.TelecomBillingAgent, account_number="12", query_type="balance")
        assert event.event_type == AgentEventType.ERROR

    async def test_activation_unknown_plan(self):
        _, event = await _run(
            telecom.ServiceActivationAgent, customer_name="Lee", service_type="Water", plan_type="Basic",
        )
        assert event.event_type == AgentEventType.ERROR

    async def test_technician_slot_is_deterministic(self):
        first = telecom.TechnicianAppointmentAgent.assign_slot("January 20, 2024")
        assert first == telecom.TechnicianAppointmentAgent.assign_slot("January 20, 2024")
        assert first in telecom.TECHNICIAN_SLOTS


# ═══════════════════════════════════════════════════════════════
# EDUCATION
# ═══════════════════════════════════════════════════════════════

@pytest.mark.asyncio
class TestEducationAgents:
    async def test_admissions_topic_answered(self):
        _, event = await _run(education.AdmissionsFAQAgent, question_topic="What are the application deadlines?")
        assert event.payload["status"] == "answered"
        assert "admissions.school.edu/apply" in event.payload["message"]

    async def test_admissions_unknown_topic_is_referred(self):
        agent, event = await _run(education.AdmissionsFAQAgent, question_topic="campus parking")
        assert event.event_type == AgentEventType.COMPLETE
        assert event.payload["status"] == "referred"
        assert agent.state == AgentState.COMPLETED

    async def test_batch_schedule(self):
        _, event = await _run(education.BatchScheduleAgent, program="Bachelor CS", academic_year="2024-2025")
        assert event.payload["total_credits"] == 120
        assert event.payload["message"].startswith("Your batch starts on 2024-08-20")

    async def test_batch_schedule_unknown_program(self):
        _, event = await _run(education.BatchScheduleAgent, program="Medicine", academic_year="2024")
        assert event.event_type == AgentEventType.ERROR
        assert event.payload["field"] == "program"

    async def test_enrollment_parses_spoken_courses(self):
        _, event = await _run(education.EnrollmentAgent, student_id="20240001", courses="cs101, math 201")
        assert event.payload["courses_enrolled"] == ["CS101", "MATH201"]
        assert event.payload["total_credits"] == 6
        assert event.payload["enrollment_id"].startswith("ENRL_")

    async def test_enrollment_accepts_course_list(self):
        _, event = await _run(education.EnrollmentAgent, student_id="20240001", courses=["cs102"])
        assert event.payload["total_credits"] == 4

    async def test_enrollment_bad_student_id(self):
        _, event = await _run(education.EnrollmentAgent, student_id="12", courses="CS101")
        assert event.event_type == AgentEventType.ERROR
        assert event.payload["field"] == "student_id"

    async def test_enrollment_full_course_escalates(self):
        agent, event = await _run(education.EnrollmentAgent, student_id="20240001", courses="CS101, ENG150")
        assert event.event_type == AgentEventType.NEED_ESCALATION
        assert event.payload["reason"] == "COURSE_UNAVAILABLE"
        assert event.payload["unavailable_courses"] == ["ENG150"]
        assert event.payload["available_courses"] == ["CS101"]
        assert agent.state == AgentState.ESCALATED

    async def test_reminder(self):
        _, event = await _run(education.ReminderAgent, reminder_type="Tuition Payment")
        assert event.payload["reminder_type"] == "TUITION"
        assert event.payload["reminder_date"] == "January 15, 2024"

    async def test_reminder_unknown_type(self):
        _, event = await _run(education.ReminderAgent, reminder_type="birthday")
        assert event.event_type == AgentEventType.ERROR


# ═══════════════════════════════════════════════════════════════
# GOVERNMENT
# ═══════════════════════════════════════════════════════════════

@pytest.mark.asyncio
class TestGovernmentAgents:
    async def test_routing_by_spoken_stem(self):
        _, event = await _run(government.CitizenRoutingAgent, inquiry_type="business licenses", location="Springfield")
        assert event.payload["department"] == "Business Licensing Department"
        assert event.payload["reference_number"].startswith("REF_")

        _, event = await _run(government.CitizenRoutingAgent, inquiry_type="tax", location="Springfield")
        assert event.payload["department"] == "Tax Assessor's Office"

    async def test_routing_unknown_inquiry(self):
        _, event = await _run(government.CitizenRoutingAgent, inquiry_type="parks", location="Springfield")
        assert event.event_type == AgentEventType.ERROR
        assert event.payload["field"] == "inquiry_type"

    async def test_complaint_recorded(self):
        _, event = await _run(
            government.ComplaintIntakeAgent,
            complaint_category="service issue",
            complaint_description="Nobody answered for a week",
            citizen_email="pat@example.org",
        )
        assert event.payload["complaint_category"] == "SERVICE_ISSUE"
        assert event.payload["complaint_id"].startswith("CMP_")

    async def test_complaint_validation(self):
        _, event = await _run(
            government.ComplaintIntakeAgent,
            complaint_category="Billing", complaint_description="x", citizen_email="not-an-email",
        )
        assert event.payload["field"] == "citizen_email"

        _, event = await _run(
            government.ComplaintIntakeAgent,
            complaint_category="noise", complaint_description="x", citizen_email="pat@example.org",
        )
        assert event.payload["field"] == "complaint_category"

    async def test_status_update(self):
        _, event = await _run(government.StatusUpdateAgent, reference_id="ref 1002", id_type="Permit")
        assert event.payload["status"] == "PENDING_DOCUMENTATION"
        assert event.payload["message"].startswith("Your permit is currently PENDING_DOCUMENTATION")

    async def test_status_unknown_reference(self):
        _, event = await _run(government.StatusUpdateAgent, reference_id="REF_9", id_type="permit")
        assert event.event_type == AgentEventType.ERROR

    async def test_permit_inspections(self):
        _, event = await _run(government.PermitTrackingAgent, permit_number="PERM_2024001", property_address="1 Elm St")
        assert "2 of 4 inspections" in event.payload["message"]

        _, event = await _run(government.PermitTrackingAgent, permit_number="perm_2024003", property_address="1 Elm St")
        assert event.payload["next_inspection"] is None
        assert event.payload["inspection_schedule"].startswith("All inspections completed")


# ═══════════════════════════════════════════════════════════════
# TRAVEL
# ═══════════════════════════════════════════════════════════════

@pytest.mark.asyncio
class TestTravelAgents:
    async def test_booking_confirmation(self):
        _, event = await _run(travel.BookingConfirmationAgent, booking_reference="bk123abc", email="sam@example.com")
        assert event.payload["booking_reference"] == "BK123ABC"
        assert event.payload["confirmation_number"] == "CONF_987654"

    async def test_booking_validation(self):
        _, event = await _run(travel.BookingConfirmationAgent, booking_reference="BK123ABC", email="sam")
        assert event.payload["field"] == "email"

        _, event = await _run(travel.BookingConfirmationAgent, booking_reference="BK999ZZZ", email="sam@example.com")
        assert event.payload["field"] == "booking_reference"

    async def test_itinerary_questions(self):
        _, event = await _run(travel.ItineraryQAAgent, booking_reference="BK123ABC", question="What activities are planned?")
        assert "Snorkeling excursion" in event.payload["details"]

        _, event = await _run(travel.ItineraryQAAgent, booking_reference="BK123ABC", question="when do I arrive")
        assert event.payload["details"].startswith("Check-in: 2024-02-15")

    async def test_itinerary_missing_for_booking(self):
        _, event = await _run(travel.ItineraryQAAgent, booking_reference="BK456DEF", question="where am I going")
        assert event.event_type == AgentEventType.ERROR

    async def test_checkin_info(self):
        _, event = await _run(travel.CheckinInfoAgent, booking_reference="BK456DEF")
        assert event.payload["check_in_time"] == "2:00 PM"
        assert event.payload["wifi_name"] == "MountainViewWiFi"

    async def test_disruption_from_spoken_type(self):
        _, event = await _run(
            travel.DisruptionAlertAgent, booking_reference="BK123ABC", disruption_type="my flight was cancelled",
        )
        assert event.payload["disruption_type"] == "FLIGHT_CANCELLATION"
        assert len(event.payload["alternatives"]) == 3

    async def test_price_drop_has_no_alternatives(self):
        _, event = await _run(travel.DisruptionAlertAgent, booking_reference="BK123ABC", disruption_type="Price Drop")
        assert event.payload["alternatives"] == []
        assert event.payload["refund_eligible"] is False

    async def test_unknown_disruption(self):
        _, event = await _run(travel.DisruptionAlertAgent, booking_reference="BK123ABC", disruption_type="volcano")
        assert event.payload["field"] == "disruption_type"


# ═══════════════════════════════════════════════════════════════
# SUPPORT DESK
# ═══════════════════════════════════════════════════════════════

@pytest.mark.asyncio
class TestSupportAgents:
    async def test_l1_known_issue(self):
        _, event = await _run(support.L1SupportAgent, issue_description="I need a Password Reset")
        assert event.payload["status"] == "resolved"
        assert event.payload["issue_type"] == "ACCOUNT_ACCESS"
        assert event.payload["ticket_id"].startswith("SUP_")

    async def test_l1_unknown_issue_escalates(self):
        agent, event = await _run(support.L1SupportAgent, issue_description="my screen is purple")
        assert event.event_type == AgentEventType.NEED_ESCALATION
        assert event.payload["reason"] == "FAQ_NO_MATCH"
        assert event.payload["ticket_id"].startswith("SUP_")
        assert agent.state == AgentState.ESCALATED

    async def test_ticket_creation(self):
        _, event = await _run(
            support.TicketCreationAgent, customer_email="dev@acme.io", issue_title="Export broken", priority="high",
        )
        assert event.payload["priority"] == "HIGH"
        assert event.payload["estimated_response"] == "1 hour"
        assert event.payload["ticket_id"].startswith("TKT_")

    async def test_ticket_bad_priority(self):
        _, event = await _run(
            support.TicketCreationAgent, customer_email="dev@acme.io", issue_title="Export broken", priority="urgent",
        )
        assert event.event_type == AgentEventType.ERROR
        assert event.payload["field"] == "priority"

    async def test_faq_lookup(self):
        _, event = await _run(support.FAQLookupAgent, search_query="how to reset my password")
        assert event.payload["articles_found"] == 1
        assert event.payload["articles"][0]["id"] == "faq_001"
        assert "keywords" not in event.payload["articles"][0]

    async def test_faq_no_results_still_completes(self):
        _, event = await _run(support.FAQLookupAgent, search_query="weather tomorrow")
        assert event.event_type == AgentEventType.COMPLETE
        assert event.payload["status"] == "no_results"

    async def test_escalation_team_and_priority(self):
        _, event = await _run(support.IssueEscalationAgent, ticket_id="tkt_77", escalation_reason="Account compromised yesterday")
        assert event.payload["ticket_id"] == "TKT_77"
        assert event.payload["escalated_to"] == "Security"
        assert event.payload["priority"] == "CRITICAL"
        assert event.payload["sla_time"] == "30 minutes"

    async def test_escalation_default_team(self):
        _, event = await _run(support.IssueEscalationAgent, ticket_id="TKT_78", escalation_reason="slow replies")
        assert event.payload["escalated_to"] == "General Support"
        assert event.payload["priority"] == "MEDIUM"
        assert event.payload["sla_time"] == "4 hours"
