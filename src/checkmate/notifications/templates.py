from __future__ import annotations

from datetime import date, datetime
from typing import Union

from jinja2 import Environment, select_autoescape

from ..common.datetime_utils import to_day
from ..people.model import Person
from .model import Message

_env = Environment(autoescape=select_autoescape(default_for_string=True))

_HTML = _env.from_string(
    """<!DOCTYPE html>
<html lang="en">
<head><meta charset="UTF-8"><title>Attendance Inquiry - CheckMate</title></head>
<body style="font-family: 'Segoe UI', Tahoma, Verdana, sans-serif; color: #2d3748;">
  <h2>Attendance Inquiry</h2>
  <p>Dear {{ name }},</p>
  <p>Our attendance system recorded that you were not present on <strong>{{ day }}</strong>.
     We wanted to reach out to make sure everything is alright.</p>
  <table>
    <tr><td>Name</td><td>{{ name }}</td></tr>
    <tr><td>Department</td><td>{{ department }}</td></tr>
    <tr><td>ID</td><td>{{ person_id }}</td></tr>
    <tr><td>Status</td><td>Absent</td></tr>
  </table>
  <p>Please reply to this email with the reason for your absence.
     If this was a planned absence that you forgot to report, let us know.</p>
  {% if supervisor %}<p>You can also contact your supervisor, {{ supervisor }}.</p>{% endif %}
  <p style="font-size: 12px; color: #718096;">This is an automated message from the CheckMate Attendance System.</p>
</body>
</html>"""
)

_TEXT = Environment(autoescape=False).from_string(
    "Dear {{ name }},\n\n"
    "Our attendance system recorded that you were not present on {{ day }}.\n"
    "Please reply to this email with the reason for your absence.\n\n"
    "CheckMate Attendance System\n"
)


def render_absentee_notice(person: Person, work_date: Union[date, datetime]) -> Message:
    day = to_day(work_date)
    context = {
        "name": person.name or "Team Member",
        "department": person.department or "General",
        "person_id": person.person_id,
        "supervisor": person.supervisor,
        "day": f"{day:%A, %B} {day.day}, {day.year}",
    }
    return Message(
        to=(person.email or "").strip(),
        subject=f"Attendance Inquiry - {day.isoformat()}",
        html=_HTML.render(**context),
        text=_TEXT.render(**context),
    )
