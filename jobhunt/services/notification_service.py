"""
Notification dispatcher for application status changes.

The transition engine talks to a Notifier with four typed sends and never
formats email bodies itself. EmailNotifier renders Jinja2 templates and hands
the result to the mail transport.
"""
import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from jobhunt.core import config
from jobhunt.services.mailer import MailTransport

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates" / "email"


@dataclass(frozen=True)
class InterviewInfo:
    """Interview detail as sent to the candidate."""
    date: Optional[datetime]
    time: str
    mode: Optional[str]
    location: str = ""
    meeting_link: str = ""
    notes: str = ""


class Notifier(ABC):
    """Sends the candidate-facing notifications of the hiring pipeline."""

    @abstractmethod
    def send_interview_scheduled(
        self, to: str, applicant_name: str, job_title: str, company_name: str, interview: InterviewInfo
    ) -> None:
        pass

    @abstractmethod
    def send_interview_rescheduled(
        self, to: str, applicant_name: str, job_title: str, company_name: str, interview: InterviewInfo
    ) -> None:
        pass

    @abstractmethod
    def send_rejected(self, to: str, applicant_name: str, job_title: str, company_name: str) -> None:
        pass

    @abstractmethod
    def send_hired(
        self, to: str, applicant_name: str, job_title: str, company_name: str, salary: Optional[float]
    ) -> None:
        pass


def _interview_context(interview: InterviewInfo) -> dict:
    onsite = interview.mode == "onsite"
    return {
        "when": interview.date.strftime("%Y-%m-%d") if interview.date else "TBD",
        "time": interview.time or "TBD",
        "mode_label": "Onsite" if onsite else "Online",
        "location_label": "Location" if onsite else "Meeting link",
        "location_line": interview.location if onsite else interview.meeting_link,
        "notes": interview.notes,
    }


def format_salary(salary: Optional[float]) -> str:
    if salary is None or not math.isfinite(salary):
        return "the discussed package"
    return f"{salary:g} LPA"


class EmailNotifier(Notifier):
    """Notifier that delivers email through the mail transport."""

    def __init__(self, transport: Optional[MailTransport] = None, app_name: Optional[str] = None):
        self.transport = transport or MailTransport()
        self.app_name = app_name or config.APP_NAME
        self.env = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            autoescape=select_autoescape(enabled_extensions=("html",), default_for_string=False),
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, template: str, **context) -> tuple:
        """Render ``<template>.txt`` and ``<template>.html`` with shared context."""
        context.setdefault("app_name", self.app_name)
        text = self.env.get_template(f"{template}.txt").render(**context)
        html = self.env.get_template(f"{template}.html").render(**context)
        return text, html

    def _deliver(self, to: str, subject: str, template: str, **context) -> None:
        text, html = self.render(template, **context)
        self.transport.send(to, f"{self.app_name} {subject}", text, html)

    def send_interview_scheduled(self, to, applicant_name, job_title, company_name, interview):
        self._deliver(
            to,
            f"Interview Scheduled - {job_title}",
            "interview_scheduled",
            applicant_name=applicant_name,
            job_title=job_title,
            company_name=company_name,
            **_interview_context(interview),
        )

    def send_interview_rescheduled(self, to, applicant_name, job_title, company_name, interview):
        self._deliver(
            to,
            f"Interview Rescheduled - {job_title}",
            "interview_rescheduled",
            applicant_name=applicant_name,
            job_title=job_title,
            company_name=company_name,
            **_interview_context(interview),
        )

    def send_rejected(self, to, applicant_name, job_title, company_name):
        self._deliver(
            to,
            f"Application Update - {job_title}",
            "rejected",
            applicant_name=applicant_name,
            job_title=job_title,
            company_name=company_name,
        )

    def send_hired(self, to, applicant_name, job_title, company_name, salary):
        self._deliver(
            to,
            f"Offer - {job_title}",
            "hired",
            applicant_name=applicant_name,
            job_title=job_title,
            company_name=company_name,
            salary_line=format_salary(salary),
        )


def get_notifier() -> Notifier:
    """Dependency hook; tests override it with a recording notifier."""
    return EmailNotifier()
