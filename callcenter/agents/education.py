"""
Education agents: admissions FAQ, batch schedules, course enrollment and deadline reminders.
"""

import re

from callcenter.agents.base_agent import BaseAgent, make_reference
from callcenter.shared.errors import AgentEscalation, AgentValidationError

STUDENT_ID_RE = re.compile(r"^\d{8}$")

ADMISSIONS_FAQ = {
    "requirements": "Our admissions requirements include a completed application, official transcripts, standardized test scores (SAT/ACT), and a personal essay.",
    "application": "You can submit your application online at admissions.school.edu/apply. The process takes about 15-20 minutes.",
    "deadline": "Regular Decision deadline is February 1st. Early Decision is November 15th. Rolling admissions begin December 1st.",
    "fee": "The application fee is $75. Fee waivers are available for qualified students. Submit a FAFSA or CSS Profile to apply.",
    "document": "Required documents include high school transcripts, standardized test scores, teacher recommendations, and a personal essay.",
    "essay": "The essay should be 500-650 words answering our optional essay prompt. It should reflect your personal story and aspirations.",
    "timeline": "Decisions are released by April 1st for Regular Decision applicants. Early Decision applicants are notified by December 15th.",
}

ADMISSIONS_LINKS = [
    "https://admissions.school.edu/requirements",
    "https://admissions.school.edu/application",
    "https://admissions.school.edu/deadlines",
]

BATCH_SCHEDULES = {
    "BACHELOR_CS_2024": {
        "schedule": [
            {"semester": 1, "start_date": "2024-08-20", "end_date": "2024-12-15", "courses": 4},
            {"semester": 2, "start_date": "2025-01-15", "end_date": "2025-05-10", "courses": 4},
            {"semester": 3, "start_date": "2025-08-20", "end_date": "2025-12-15", "courses": 5},
            {"semester": 4, "start_date": "2026-01-15", "end_date": "2026-05-10", "courses": 5},
        ],
        "total_credits": 120,
        "core_courses": ["Data Structures", "Algorithms", "Operating Systems", "Database Systems"],
        "electives": ["Machine Learning", "Web Development", "Cloud Computing", "Mobile Apps"],
    },
    "BACHELOR_BUS_2024": {
        "schedule": [
            {"semester": 1, "start_date": "2024-09-01", "end_date": "2024-12-20", "courses": 4},
            {"semester": 2, "start_date": "2025-01-20", "end_date": "2025-05-15", "courses": 4},
            {"semester": 3, "start_date": "2025-09-01", "end_date": "2025-12-20", "courses": 4},
            {"semester": 4, "start_date": "2026-01-20", "end_date": "2026-05-15", "courses": 4},
        ],
        "total_credits": 120,
        "core_courses": ["Accounting", "Finance", "Marketing", "Management"],
        "electives": ["Entrepreneurship", "International Business", "Supply Chain", "Analytics"],
    },
}

COURSES = {
    "CS101": {"credits": 3, "available": True, "enrolled": 28, "capacity": 30},
    "CS102": {"credits": 4, "available": True, "enrolled": 25, "capacity": 30},
    "MATH201": {"credits": 3, "available": True, "enrolled": 35, "capacity": 35},
    "ENG150": {"credits": 3, "available": False, "enrolled": 40, "capacity": 40},
    "BUS101": {"credits": 3, "available": True, "enrolled": 20, "capacity": 25},
}

REMINDERS = {
    "REGISTRATION": {"date": "March 1, 2024", "time": "9:00 AM", "description": "Course registration deadline for Fall semester"},
    "EXAM": {"date": "April 15, 2024", "time": "8:00 AM", "description": "Final exam period begins"},
    "ASSIGNMENT": {"date": "February 28, 2024", "time": "11:59 PM", "description": "Major assignment submissions due"},
    "TUITION": {"date": "January 15, 2024", "time": "12:00 PM", "description": "Spring semester tuition payment due"},
    "GRADES": {"date": "December 20, 2023", "time": "3:00 PM", "description": "Final grades posted for review"},
}


def parse_courses(value) -> list[str]:
    """Course codes from a list or a spoken/typed string such as 'cs101, math 201'."""
    if isinstance(value, (list, tuple)):
        items = [str(v) for v in value]
    else:
        items = re.split(r"[,;]|\band\b", str(value))
    return [re.sub(r"\s+", "", item).upper() for item in items if item.strip()]


class AdmissionsFAQAgent(BaseAgent):
    """Answers common admissions questions."""

    required_fields = ("question_topic",)
    sector = "education"
    agent_type = "ADMISSIONS_FAQ"
    field_prompts = {
        "question_topic": "What would you like to know about admissions? (e.g., requirements, application process, deadlines, fees)",
    }

    async def handle(self) -> dict:
        topic = str(self.data["question_topic"])
        lowered = topic.lower()
        answer = next((text for key, text in ADMISSIONS_FAQ.items() if key in lowered), None)
        if answer is None:
            # Referred to the admissions office rather than a live handoff
            return {
                "status": "referred",
                "question_topic": topic,
                "message": "Your question needs further assistance. Our admissions team will contact you within 24 hours.",
                "contact_email": "admissions@school.edu",
                "phone": "(555) 123-4567",
            }
        return {
            "status": "answered",
            "question_topic": topic,
            "answer": answer,
            "related_links": ADMISSIONS_LINKS,
            "message": answer,
            "follow_up": "Is there anything else you'd like to know about admissions?",
        }


class BatchScheduleAgent(BaseAgent):
    required_fields = ("program", "academic_year")
    sector = "education"
    agent_type = "BATCH_SCHEDULE"
    field_prompts = {
        "program": "What program are you interested in? (e.g., Bachelor CS, Bachelor BUS)",
        "academic_year": "Which academic year? (e.g., 2024-2025)",
    }

    @staticmethod
    def schedule_key(program: str, academic_year: str) -> str:
        program_key = re.sub(r"\W+", "_", program.strip()).upper()
        start_year = str(academic_year).strip().split("-")[0]
        return f"{program_key}_{start_year}"

    async def handle(self) -> dict:
        batch = BATCH_SCHEDULES.get(self.schedule_key(str(self.data["program"]), str(self.data["academic_year"])))
        if batch is None:
            raise AgentValidationError("Program or academic year not found.", field="program")
        semesters = len(batch["schedule"])
        return {
            "status": "success",
            "program": self.data["program"],
            "academic_year": self.data["academic_year"],
            "batch_schedule": batch["schedule"],
            "total_credits": batch["total_credits"],
            "core_courses": batch["core_courses"],
            "electives_available": batch["electives"],
            "message": (
                f"Your batch starts on {batch['schedule'][0]['start_date']}. "
                f"Total {batch['total_credits']} credits across {semesters} semesters."
            ),
        }


class EnrollmentAgent(BaseAgent):
    required_fields = ("student_id", "courses")
    sector = "education"
    agent_type = "ENROLLMENT"
    field_prompts = {
        "student_id": "What is your student ID?",
        "courses": "Which courses would you like to enroll in? (comma-separated course codes, e.g., CS101, CS102, MATH201)",
    }

    async def handle(self) -> dict:
        student_id = str(self.data["student_id"]).strip()
        if not STUDENT_ID_RE.match(student_id):
            raise AgentValidationError("Invalid student ID. Please verify and try again.", field="student_id")

        courses = parse_courses(self.data["courses"])
        if not courses:
            raise AgentValidationError("Please tell us at least one course code.", field="courses")

        available = [c for c in courses if COURSES.get(c, {}).get("available")]
        unavailable = [c for c in courses if c not in available]
        if unavailable:
            raise AgentEscalation(
                f"Some courses are not available: {', '.join(unavailable)}",
                reason="COURSE_UNAVAILABLE",
                available_courses=available,
                unavailable_courses=unavailable,
            )

        credits = sum(COURSES[c]["credits"] for c in courses)
        return {
            "status": "enrolled",
            "enrollment_id": make_reference("ENRL"),
            "student_id": student_id,
            "courses_enrolled": courses,
            "total_credits": credits,
            "enrollment_confirmation": "Confirmation email sent to your student email.",
            "message": f"Successfully enrolled in {len(courses)} courses totaling {credits} credits.",
        }


class ReminderAgent(BaseAgent):
    required_fields = ("reminder_type",)
    sector = "education"
    agent_type = "REMINDER"
    field_prompts = {
        "reminder_type": "What would you like a reminder for? (Registration Deadline, Exam Date, Assignment Due, Tuition Payment, Grade Review)",
    }

    @staticmethod
    def match_reminder(reminder_type: str):
        wanted = reminder_type.upper()
        for key in REMINDERS:
            if key.rstrip("S") in wanted:
                return key
        return None

    async def handle(self) -> dict:
        key = self.match_reminder(str(self.data["reminder_type"]))
        if key is None:
            raise AgentValidationError("Invalid reminder type.", field="reminder_type")
        details = REMINDERS[key]
        return {
            "status": "reminder_set",
            "reminder_id": make_reference("REM"),
            "reminder_type": key,
            "reminder_date": details["date"],
            "reminder_time": details["time"],
            "description": details["description"],
            "delivery_method": "Email, SMS, and In-App notification",
            "message": f"Reminder set for {details['description']} on {details['date']} at {details['time']}.",
        }


AGENTS = {
    "AdmissionsFAQAgent": AdmissionsFAQAgent,
    "BatchScheduleAgent": BatchScheduleAgent,
    "EnrollmentAgent": EnrollmentAgent,
    "ReminderAgent": ReminderAgent,
}
