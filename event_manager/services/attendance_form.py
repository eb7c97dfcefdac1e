"""The attendance confirmation form sent with every invitation.

Question titles and choice labels are shared with the form response
reconciler, which finds answers by exact title and maps the exact labels.
"""
from datetime import datetime

from event_manager.google.forms import Question
from event_manager.models import AttendanceStatus, Event

NAME_QUESTION = "이름"
EMAIL_QUESTION = "이메일"
STATUS_QUESTION = "참석 여부"
MESSAGE_QUESTION = "추가 메시지 (선택사항)"

STATUS_BY_ANSWER = {
    "참석합니다": AttendanceStatus.ATTENDING,
    "불참합니다": AttendanceStatus.NOT_ATTENDING,
    "미정입니다": AttendanceStatus.MAYBE,
}

WEEKDAYS = ["월", "화", "수", "목", "금", "토", "일"]


def format_korean_date(value: datetime) -> str:
    """e.g. ``2025년 3월 14일 금요일``"""
    return f"{value.year}년 {value.month}월 {value.day}일 {WEEKDAYS[value.weekday()]}요일"


def format_korean_time(value: datetime) -> str:
    """e.g. ``오후 02:30``"""
    period = "오전" if value.hour < 12 else "오후"
    hour = value.hour % 12 or 12
    return f"{period} {hour:02d}:{value.minute:02d}"


def form_title(event: Event) -> str:
    return f"[{event.name}] 참석 확인"


def form_description(event: Event) -> str:
    return (
        "행사 정보:\n\n"
        f"📅 날짜: {format_korean_date(event.date)}\n"
        f"📍 장소: {event.location}\n"
        f"👨‍🏫 강사: {event.instructor}\n"
        f"📝 내용: {event.description}\n\n"
        "아래 양식을 작성하여 참석 여부를 알려주세요."
    )


def form_questions() -> list[Question]:
    return [
        Question(NAME_QUESTION),
        Question(EMAIL_QUESTION),
        Question(STATUS_QUESTION, options=list(STATUS_BY_ANSWER)),
        Question(MESSAGE_QUESTION, required=False, paragraph=True),
    ]
