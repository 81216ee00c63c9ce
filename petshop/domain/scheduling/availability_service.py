"""Overlap detection over same-day appointments"""

from datetime import datetime, timedelta
from typing import Iterable, Optional

from ...models import Appointment, AppointmentStatus


def appointment_end(appointment: Appointment) -> datetime:
    return appointment.date + timedelta(minutes=sum(s.duration for s in appointment.services))


def intervals_overlap(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Half-open overlap: back-to-back intervals do not overlap"""
    return a_start < b_end and b_start < a_end


def find_conflict(
    candidate_start: datetime, candidate_end: datetime, existing: Iterable[Appointment]
) -> Optional[Appointment]:
    """Return the first non-cancelled appointment overlapping the candidate window"""
    for appointment in existing:
        if appointment.status == AppointmentStatus.CANCELLED.value:
            continue
        if intervals_overlap(candidate_start, candidate_end, appointment.date, appointment_end(appointment)):
            return appointment
    return None


def busy_intervals(appointments: Iterable[Appointment]) -> list[dict]:
    """Occupied windows for a day, used by clients to disable conflicting slots"""
    busy = []
    for appointment in appointments:
        if appointment.status == AppointmentStatus.CANCELLED.value:
            continue
        busy.append(
            {
                "start": appointment.date.isoformat(),
                "end": appointment_end(appointment).isoformat(),
                "appointmentId": appointment.id,
                "status": appointment.status,
            }
        )
    busy.sort(key=lambda item: item["start"])
    return busy
