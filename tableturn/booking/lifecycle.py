"""Reservation state machine.

``ReservationLifecycle`` works on one session (one transaction attempt). It is
constructed by :class:`tableturn.booking.engine.BookingEngine` inside the
conflict guard, so every read it performs is repeated when an attempt is
retried.
"""

import enum
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Tuple
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import structlog

from tableturn.booking.availability import AvailabilityChecker, validate_capacity
from tableturn.booking.errors import (
    InvalidStateTransition,
    NotFound,
    PolicyViolation,
    TransactionConflict,
    ValidationError,
)
from tableturn.booking.guard import GuardScope
from tableturn.booking.intervals import format_minutes, minutes_of, parse_date, parse_time, to_time
from tableturn.booking.repository import ReservationRepository, RestaurantReader
from tableturn.models.audit import AuditLog
from tableturn.models.reservation import (
    BLOCKING_STATUSES,
    PaymentStatus,
    Reservation,
    ReservationStatus,
)
from tableturn.models.restaurant import Restaurant, RestaurantSettings
from tableturn.models.user import User, UserRole

logger = structlog.get_logger()

Clock = Callable[[], datetime]

DEFAULT_NOTICE_HOURS = 2
DEFAULT_ADVANCE_DAYS = 30
DEFAULT_MAX_PARTY_SIZE = 20
REJECT_REASON_MIN = 5
REJECT_REASON_MAX = 200
CUSTOMER_CANCEL_REASON = "Cancelled by customer"
STAFF_CANCEL_REASON = "Cancelled by restaurant"


class ActorKind(str, enum.Enum):
    CUSTOMER = "customer"
    STAFF = "staff"


@dataclass(frozen=True)
class Actor:
    """Who is asking.

    Staff with ``restaurant_id=None`` (platform admins) may act on every
    restaurant.
    """
    kind: ActorKind
    user_id: Optional[UUID] = None
    restaurant_id: Optional[UUID] = None

    @classmethod
    def customer(cls, user_id: UUID) -> "Actor":
        return cls(ActorKind.CUSTOMER, user_id=user_id)

    @classmethod
    def staff(cls, user_id: Optional[UUID] = None, restaurant_id: Optional[UUID] = None) -> "Actor":
        return cls(ActorKind.STAFF, user_id=user_id, restaurant_id=restaurant_id)

    @classmethod
    def from_user(cls, user: User) -> "Actor":
        if user.role == UserRole.CUSTOMER:
            return cls.customer(user.id)
        if user.role == UserRole.SUPER_ADMIN:
            return cls.staff(user.id)
        return cls.staff(user.id, user.restaurant_id)

    @property
    def is_staff(self) -> bool:
        return self.kind == ActorKind.STAFF

    def can_manage(self, restaurant_id: UUID) -> bool:
        return self.is_staff and (self.restaurant_id is None or self.restaurant_id == restaurant_id)

    def can_see(self, reservation: Reservation) -> bool:
        if self.is_staff:
            return self.can_manage(reservation.restaurant_id)
        return reservation.customer_id is not None and reservation.customer_id == self.user_id


class Action(str, enum.Enum):
    CONFIRM = "confirm"
    REJECT = "reject"
    CANCEL = "cancel"
    COMPLETE = "complete"
    NO_SHOW = "no-show"
    RESCHEDULE = "reschedule"


@dataclass(frozen=True)
class TransitionRule:
    from_statuses: FrozenSet[ReservationStatus]
    actors: FrozenSet[ActorKind]
    target: Optional[ReservationStatus]


_STAFF = frozenset({ActorKind.STAFF})
_ANYONE = frozenset({ActorKind.STAFF, ActorKind.CUSTOMER})

TRANSITIONS: Dict[Action, TransitionRule] = {
    Action.CONFIRM: TransitionRule(frozenset({ReservationStatus.PENDING}), _STAFF, ReservationStatus.CONFIRMED),
    Action.REJECT: TransitionRule(frozenset({ReservationStatus.PENDING}), _STAFF, ReservationStatus.REJECTED),
    Action.CANCEL: TransitionRule(BLOCKING_STATUSES, _ANYONE, ReservationStatus.CANCELLED),
    Action.COMPLETE: TransitionRule(frozenset({ReservationStatus.CONFIRMED}), _STAFF, ReservationStatus.COMPLETED),
    Action.NO_SHOW: TransitionRule(frozenset({ReservationStatus.CONFIRMED}), _STAFF, ReservationStatus.NO_SHOW),
    Action.RESCHEDULE: TransitionRule(BLOCKING_STATUSES, _ANYONE, None),
}


@dataclass
class CustomerInfo:
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


@dataclass
class PreOrderLine:
    menu_item_id: UUID
    quantity: int = 1


@dataclass
class ReservationRequest:
    """Everything needed to put a new reservation on a table"""
    restaurant_id: UUID
    table_id: UUID
    date: str
    time: str
    party_size: int
    duration_minutes: Optional[int] = None
    customer_id: Optional[UUID] = None
    customer: CustomerInfo = field(default_factory=CustomerInfo)
    special_requests: Optional[str] = None
    pre_order: List[PreOrderLine] = field(default_factory=list)


@dataclass
class TransitionPayload:
    """Optional inputs of a transition; which fields matter depends on the action"""
    reason: Optional[str] = None
    staff_notes: Optional[str] = None
    payment_status: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    duration_minutes: Optional[int] = None


@dataclass(frozen=True)
class CancellationPolicy:
    allowed: bool
    notice_hours: int

    @classmethod
    def from_settings(cls, settings: Optional[RestaurantSettings]) -> "CancellationPolicy":
        if settings is None:
            return cls(allowed=True, notice_hours=DEFAULT_NOTICE_HOURS)

        if settings.allow_free_cancel is not None:
            allowed = settings.allow_free_cancel
        elif settings.allows_cancellation is not None:
            allowed = settings.allows_cancellation
        else:
            allowed = True

        if settings.cancel_before_hours is not None:
            notice = settings.cancel_before_hours
        elif settings.min_booking_hours is not None:
            notice = settings.min_booking_hours
        else:
            notice = DEFAULT_NOTICE_HOURS

        return cls(allowed=bool(allowed), notice_hours=notice)


def restaurant_zone(restaurant: Restaurant) -> ZoneInfo:
    name = restaurant.timezone or "UTC"
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown restaurant timezone, using UTC", restaurant_id=str(restaurant.id), timezone=name)
        return ZoneInfo("UTC")


def snapshot(reservation: Reservation) -> Dict[str, Any]:
    return {
        "status": reservation.status,
        "date": reservation.reservation_date.isoformat(),
        "time": format_minutes(minutes_of(reservation.start_time)),
        "duration_minutes": reservation.duration_minutes,
        "party_size": reservation.party_size,
    }


class ReservationLifecycle:
    def __init__(
        self,
        reservations: ReservationRepository,
        restaurants: RestaurantReader,
        guard: GuardScope,
        clock: Clock,
        default_duration: int = 120,
        min_party_size: int = 1,
    ):
        self.reservations = reservations
        self.restaurants = restaurants
        self.guard = guard
        self.clock = clock
        self.default_duration = default_duration
        self.min_party_size = min_party_size
        self.checker = AvailabilityChecker(reservations, restaurants)

    # ------------------------------------------------------------------
    # helpers

    async def _restaurant(self, restaurant_id: UUID) -> Restaurant:
        restaurant = await self.restaurants.get_restaurant(restaurant_id)
        if restaurant is None or not restaurant.is_active:
            raise NotFound("Restaurant not found", restaurant_id=str(restaurant_id))
        return restaurant

    def _booking_instant(self, restaurant: Restaurant, day: date, start: int) -> datetime:
        return datetime.combine(day, to_time(start), tzinfo=restaurant_zone(restaurant))

    def _hours_until(self, restaurant: Restaurant, day: date, start: int) -> float:
        delta = self._booking_instant(restaurant, day, start) - self.clock()
        return delta.total_seconds() / 3600

    def _validate_horizon(
        self,
        restaurant: Restaurant,
        settings: Optional[RestaurantSettings],
        day: date,
        start: int,
    ) -> None:
        if self._hours_until(restaurant, day, start) <= 0:
            raise ValidationError(
                "Reservation must be in the future",
                date=day.isoformat(),
                time=format_minutes(start),
            )

        advance_days = settings.advance_booking_days if settings and settings.advance_booking_days else DEFAULT_ADVANCE_DAYS
        today = self.clock().astimezone(restaurant_zone(restaurant)).date()
        if day > today + timedelta(days=advance_days):
            raise ValidationError(
                f"Reservations can be made at most {advance_days} days in advance",
                date=day.isoformat(),
                advance_booking_days=advance_days,
            )

    def _validate_party_size(self, settings: Optional[RestaurantSettings], party_size: int) -> None:
        max_party = settings.max_party_size if settings and settings.max_party_size else DEFAULT_MAX_PARTY_SIZE
        if party_size < self.min_party_size or party_size > max_party:
            raise ValidationError(
                f"Party size must be between {self.min_party_size} and {max_party}",
                party_size=party_size,
            )

    async def _price_pre_order(self, restaurant_id: UUID, lines: List[PreOrderLine]) -> Tuple[List[Dict[str, Any]], int]:
        if not lines:
            return [], 0

        items = await self.restaurants.get_menu_items(restaurant_id, [line.menu_item_id for line in lines])
        by_id = {item.id: item for item in items}

        stored = []
        total = 0
        for line in lines:
            item = by_id.get(line.menu_item_id)
            if item is None or not item.is_available:
                raise ValidationError(
                    "Menu item is not available",
                    menu_item_id=str(line.menu_item_id),
                )
            if line.quantity < 1:
                raise ValidationError("Quantity must be at least 1", menu_item_id=str(item.id))
            total += item.price_cents * line.quantity
            stored.append({
                "menu_item_id": str(item.id),
                "name": item.name,
                "quantity": line.quantity,
                "price_cents": item.price_cents,
            })
        return stored, total

    async def _audit(
        self,
        reservation: Reservation,
        actor: Actor,
        action: str,
        before: Optional[Dict[str, Any]],
        after: Dict[str, Any],
    ) -> None:
        await self.reservations.record_event(AuditLog(
            restaurant_id=reservation.restaurant_id,
            actor_id=actor.user_id,
            actor_type=actor.kind.value,
            action=action,
            resource_type="reservation",
            resource_id=reservation.id,
            data_json={"before": before, "after": after},
            created_at=self.clock(),
        ))

    async def _require_customer(self, user_id: UUID) -> User:
        user = await self.restaurants.get_user(user_id)
        if user is None or not user.is_active or user.role != UserRole.CUSTOMER:
            raise NotFound("Customer not found", customer_id=str(user_id))
        return user

    # ------------------------------------------------------------------
    # create

    async def create(self, request: ReservationRequest, actor: Actor) -> Reservation:
        restaurant = await self._restaurant(request.restaurant_id)
        if actor.is_staff and not actor.can_manage(restaurant.id):
            raise NotFound("Restaurant not found", restaurant_id=str(restaurant.id))

        table = await self.checker.get_table(request.table_id)
        if table.restaurant_id != restaurant.id:
            raise NotFound("Table not found", table_id=str(request.table_id))

        settings = await self.restaurants.get_settings(restaurant.id)
        day = parse_date(request.date)
        start = parse_time(request.time)
        duration = self.default_duration if request.duration_minutes is None else request.duration_minutes

        self._validate_party_size(settings, request.party_size)
        validate_capacity(table, request.party_size)
        self._validate_horizon(restaurant, settings, day, start)
        pre_order, total_cents = await self._price_pre_order(restaurant.id, request.pre_order)

        if actor.is_staff:
            customer_id = request.customer_id
            if customer_id is not None:
                await self._require_customer(customer_id)
        else:
            customer_id = actor.user_id
        if not request.customer.name or not request.customer.phone:
            raise ValidationError("Customer name and phone are required")

        token = await self.guard.observe(table.id, day)
        await self.checker.ensure_available(table, day, start, duration, party_size=request.party_size)
        await self.guard.claim(token)

        now = self.clock()
        reservation = await self.reservations.add(Reservation(
            restaurant_id=restaurant.id,
            table_id=table.id,
            customer_id=customer_id,
            created_by_id=actor.user_id,
            customer_name=request.customer.name,
            customer_phone=request.customer.phone,
            customer_email=request.customer.email,
            reservation_date=day,
            start_time=to_time(start),
            duration_minutes=duration,
            party_size=request.party_size,
            special_requests=request.special_requests,
            status=ReservationStatus.PENDING.value,
            pre_order=pre_order,
            total_cents=total_cents,
            payment_status=PaymentStatus.PENDING.value,
            staff_notes="",
            created_at=now,
            updated_at=now,
        ))
        await self._audit(reservation, actor, "create", None, snapshot(reservation))

        logger.info(
            "Reservation created",
            reservation_id=str(reservation.id),
            restaurant_id=str(restaurant.id),
            table_id=str(table.id),
            date=day.isoformat(),
            time=format_minutes(start),
            duration=duration,
            party_size=request.party_size,
            actor=actor.kind.value,
        )
        return reservation

    # ------------------------------------------------------------------
    # transitions

    async def apply(
        self,
        reservation_id: UUID,
        action: Action,
        actor: Actor,
        payload: Optional[TransitionPayload] = None,
    ) -> Reservation:
        payload = payload or TransitionPayload()

        reservation = await self.reservations.get(reservation_id)
        if reservation is None or not actor.can_see(reservation):
            raise NotFound("Reservation not found", reservation_id=str(reservation_id))

        status = reservation.current_status
        rule = TRANSITIONS[action]
        if status.is_terminal:
            raise InvalidStateTransition(
                f"Reservation is already {status.value}",
                status=status.value,
                action=action.value,
            )
        if actor.kind not in rule.actors:
            raise InvalidStateTransition(
                f"A {actor.kind.value} cannot {action.value} a reservation",
                status=status.value,
                action=action.value,
            )
        if status not in rule.from_statuses:
            raise InvalidStateTransition(
                f"Cannot {action.value} a {status.value} reservation",
                status=status.value,
                action=action.value,
            )

        handler = getattr(self, "_" + action.name.lower())
        values = await handler(reservation, actor, payload)
        if rule.target is not None:
            values["status"] = rule.target.value
        values["updated_at"] = self.clock()

        before = snapshot(reservation)
        if not await self.reservations.update_if_version(reservation.id, reservation.version, values):
            raise TransactionConflict("reservation version moved")

        updated = await self.reservations.get(reservation.id)
        await self._audit(updated, actor, action.value, before, snapshot(updated))

        logger.info(
            "Reservation transition applied",
            reservation_id=str(updated.id),
            action=action.value,
            from_status=status.value,
            to_status=updated.status,
            actor=actor.kind.value,
        )
        return updated

    def _notes(self, payload: TransitionPayload) -> Dict[str, Any]:
        return {"staff_notes": payload.staff_notes} if payload.staff_notes is not None else {}

    async def _confirm(self, reservation: Reservation, actor: Actor, payload: TransitionPayload) -> Dict[str, Any]:
        values = self._notes(payload)
        if reservation.confirmed_at is None:
            values["confirmed_at"] = self.clock()
        return values

    async def _reject(self, reservation: Reservation, actor: Actor, payload: TransitionPayload) -> Dict[str, Any]:
        reason = (payload.reason or "").strip()
        if not REJECT_REASON_MIN <= len(reason) <= REJECT_REASON_MAX:
            raise ValidationError(
                f"Rejection reason must be between {REJECT_REASON_MIN} and {REJECT_REASON_MAX} characters"
            )
        values = self._notes(payload)
        values["cancellation_reason"] = reason
        return values

    async def _cancel(self, reservation: Reservation, actor: Actor, payload: TransitionPayload) -> Dict[str, Any]:
        values: Dict[str, Any] = {}
        if actor.is_staff:
            reason = payload.reason or STAFF_CANCEL_REASON
            note = f"{STAFF_CANCEL_REASON}: {payload.reason}" if payload.reason else STAFF_CANCEL_REASON
            values["staff_notes"] = f"{reservation.staff_notes}\n{note}" if reservation.staff_notes else note
        else:
            reason = payload.reason or CUSTOMER_CANCEL_REASON
            await self._check_cancellation_policy(reservation)

        values["cancellation_reason"] = reason
        if reservation.cancelled_at is None:
            values["cancelled_at"] = self.clock()
        return values

    async def _check_cancellation_policy(self, reservation: Reservation) -> None:
        restaurant = await self._restaurant(reservation.restaurant_id)
        policy = CancellationPolicy.from_settings(await self.restaurants.get_settings(restaurant.id))
        if not policy.allowed:
            raise PolicyViolation("This restaurant does not allow cancellations")

        hours_until = self._hours_until(
            restaurant,
            reservation.reservation_date,
            minutes_of(reservation.start_time),
        )
        if hours_until < policy.notice_hours:
            raise PolicyViolation(
                f"Cancellations must be made at least {policy.notice_hours} hours before the reservation",
                required_hours=policy.notice_hours,
                hours_until_booking=round(hours_until, 2),
            )

    async def _complete(self, reservation: Reservation, actor: Actor, payload: TransitionPayload) -> Dict[str, Any]:
        values = self._notes(payload)
        if payload.payment_status is not None:
            try:
                values["payment_status"] = PaymentStatus(payload.payment_status).value
            except ValueError:
                raise ValidationError("Unknown payment status", payment_status=payload.payment_status) from None
        return values

    async def _no_show(self, reservation: Reservation, actor: Actor, payload: TransitionPayload) -> Dict[str, Any]:
        return self._notes(payload)

    async def _reschedule(self, reservation: Reservation, actor: Actor, payload: TransitionPayload) -> Dict[str, Any]:
        if payload.date is None and payload.time is None and payload.duration_minutes is None:
            raise ValidationError("Nothing to reschedule: provide a new date, time or duration")

        day = parse_date(payload.date) if payload.date is not None else reservation.reservation_date
        start = parse_time(payload.time) if payload.time is not None else minutes_of(reservation.start_time)
        duration = reservation.duration_minutes if payload.duration_minutes is None else payload.duration_minutes

        restaurant = await self._restaurant(reservation.restaurant_id)
        settings = await self.restaurants.get_settings(restaurant.id)
        table = await self.checker.get_table(reservation.table_id)
        self._validate_horizon(restaurant, settings, day, start)

        token = await self.guard.observe(table.id, day)
        await self.checker.ensure_available(
            table, day, start, duration,
            exclude_reservation_id=reservation.id,
            party_size=reservation.party_size,
        )
        await self.guard.claim(token)

        return {
            "reservation_date": day,
            "start_time": to_time(start),
            "duration_minutes": duration,
        }
