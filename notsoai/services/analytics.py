"""
Dashboard aggregations.

Every function takes normalised chat sessions (see services.mappers) that may
carry an `analysis` dict, already scoped to one tenant and date range, and
returns plain dicts ready for JSON. Percentages are 0..100 of the input size.
"""

from collections import Counter, OrderedDict
from typing import Any, Dict, List, Optional

from notsoai.utils.dates import parse_timestamp

UNKNOWN = "Unknown"


def _analyses(sessions: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [s["analysis"] for s in sessions if isinstance(s.get("analysis"), dict)]


def _percentage(count: int, total: int) -> float:
    return (count / total) * 100 if total > 0 else 0


def _average(values: List[Optional[float]]) -> float:
    present = [v for v in values if v is not None]
    return sum(present) / len(present) if present else 0


def _breakdown(labels: List[Optional[str]], key: str) -> List[Dict[str, Any]]:
    total = len(labels)
    counts = Counter(label or UNKNOWN for label in labels)
    rows = [
        {key: label, "count": count, "percentage": _percentage(count, total)}
        for label, count in counts.items()
    ]
    return sorted(rows, key=lambda row: row["count"], reverse=True)


def _fixed_breakdown(values: List[Optional[str]], levels, key: str) -> List[Dict[str, Any]]:
    total = len(values)
    counts = Counter(values)
    return [
        {key: level, "count": counts[level], "percentage": _percentage(counts[level], total)}
        for level in levels
    ]


# =====================================================
# OVERVIEW
# =====================================================

def overview_metrics(sessions: List[Dict[str, Any]]) -> Dict[str, Any]:
    total_sessions = len(sessions)
    analyses = _analyses(sessions)

    resolved = sum(1 for a in analyses if a.get("resolution_status") == "resolved")
    escalated = sum(1 for a in analyses if a.get("escalated"))

    return {
        "totalSessions": total_sessions,
        "totalMessages": sum(s.get("total_messages") or 0 for s in sessions),
        "totalTokens": sum(s.get("total_tokens") or 0 for s in sessions),
        "totalCostEur": sum(s.get("total_cost_eur") or 0 for s in sessions),
        "averageResponseTimeMs": _average(
            [s.get("average_response_time_ms") for s in sessions]
        ),
        "averageSessionDurationSeconds": _average(
            [s.get("session_duration_seconds") for s in sessions]
        ),
        "resolutionRate": _percentage(resolved, total_sessions),
        "escalationRate": _percentage(escalated, total_sessions),
    }


# =====================================================
# BREAKDOWNS
# =====================================================

def sentiment_breakdown(sessions: List[Dict[str, Any]]) -> Dict[str, int]:
    counts = Counter(a.get("sentiment") for a in _analyses(sessions))
    return {
        "positive": counts["positive"],
        "neutral": counts["neutral"],
        "negative": counts["negative"],
    }


def category_breakdown(sessions):
    return _breakdown([a.get("category") for a in _analyses(sessions)], "category")


def language_breakdown(sessions):
    return _breakdown([a.get("language") for a in _analyses(sessions)], "language")


def device_breakdown(sessions):
    return _breakdown([s.get("device_type") for s in sessions], "deviceType")


def country_breakdown(sessions):
    return _breakdown([s.get("visitor_country") for s in sessions], "country")


def engagement_breakdown(sessions):
    return _fixed_breakdown(
        [a.get("engagement_level") for a in _analyses(sessions)],
        ("low", "medium", "high"),
        "level",
    )


def conversation_type_breakdown(sessions):
    return _fixed_breakdown(
        [a.get("conversation_type") for a in _analyses(sessions)],
        ("casual", "goal_driven"),
        "type",
    )


# =====================================================
# TIME
# =====================================================

def time_series(sessions: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    by_date: Dict[str, Dict[str, Any]] = {}

    for session in sessions:
        started = parse_timestamp(session.get("session_started_at"))
        if started is None:
            continue
        point = by_date.setdefault(
            started.date().isoformat(),
            {"sessions": 0, "messages": 0, "tokens": 0, "cost": 0},
        )
        point["sessions"] += 1
        point["messages"] += session.get("total_messages") or 0
        point["tokens"] += session.get("total_tokens") or 0
        point["cost"] += session.get("total_cost_eur") or 0

    return [{"date": day, **by_date[day]} for day in sorted(by_date)]


def hourly_breakdown(sessions: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    # hours are UTC
    hours = [parse_timestamp(s.get("session_started_at")) for s in sessions]
    counts = Counter(h.hour for h in hours if h is not None)
    total = len(sessions)
    return [
        {"hour": hour, "count": counts[hour], "percentage": _percentage(counts[hour], total)}
        for hour in range(24)
    ]


# =====================================================
# QUESTIONS
# =====================================================

def question_analytics(sessions: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    totals: Dict[str, Dict[str, int]] = OrderedDict()

    for analysis in _analyses(sessions):
        for question in analysis.get("questions") or []:
            totals.setdefault(question, {"total": 0, "unanswered": 0})["total"] += 1
        for question in analysis.get("unanswered_questions") or []:
            totals.setdefault(question, {"total": 0, "unanswered": 0})["unanswered"] += 1

    rows = [
        {
            "question": question,
            "frequency": counts["total"],
            "answered": counts["unanswered"] == 0,
        }
        for question, counts in totals.items()
    ]
    return sorted(rows, key=lambda row: row["frequency"], reverse=True)


def unanswered_questions(sessions: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    counts = Counter()
    for analysis in _analyses(sessions):
        counts.update(analysis.get("unanswered_questions") or [])

    rows = [
        {"question": question, "frequency": frequency, "answered": False}
        for question, frequency in counts.items()
    ]
    return sorted(rows, key=lambda row: row["frequency"], reverse=True)


def build_report(sessions: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "overview": overview_metrics(sessions),
        "sentiment": sentiment_breakdown(sessions),
        "categories": category_breakdown(sessions),
        "languages": language_breakdown(sessions),
        "devices": device_breakdown(sessions),
        "countries": country_breakdown(sessions),
        "engagement": engagement_breakdown(sessions),
        "conversationTypes": conversation_type_breakdown(sessions),
        "timeSeries": time_series(sessions),
        "hourly": hourly_breakdown(sessions),
        "questions": question_analytics(sessions),
        "unansweredQuestions": unanswered_questions(sessions),
    }
