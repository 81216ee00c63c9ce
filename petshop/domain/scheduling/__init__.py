"""
Scheduling Domain

Appointment booking, conflict detection and appointment lifecycle.

Structure:
```
petshop/domain/scheduling/
├── __init__.py
├── time_calculator.py      # Operating hours and duration arithmetic (pure)
├── availability_service.py # Overlap detection and busy intervals (pure)
├── repository.py           # Appointment / shop / service queries
├── schemas.py              # Booking and appointment schemas
├── service.py              # BookingService: transactional booking, status, cancel
└── router.py               # /appointments endpoints
```

Booking flow (one database transaction):
1. Load the shop schedule (row locked) and requested services
2. Check the requested window against the day's opening hours
3. Reject overlaps with same-day appointments that are not cancelled
4. Consume subscription credits when the booking is subscription-funded
5. Insert the appointment (CONFIRMED if subscription-funded, else PENDING)

Any failure rolls the transaction back, so no appointment row and no credit
change survive a rejected booking.

Times are local wall-clock times of the host. The shop schedule carries no
timezone.
"""
