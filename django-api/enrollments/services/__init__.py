from enrollments.services.decisions import DecisionService
from enrollments.services.intake import IntakeValidator
from enrollments.services.ledger import SeatLedger
from enrollments.services.promotions import PromotionLinker
from enrollments.services.queries import RequestQueryService
from enrollments.services.reservations import ReservationService
from enrollments.services.side_effects import SideEffects

__all__ = [
    "DecisionService",
    "IntakeValidator",
    "PromotionLinker",
    "RequestQueryService",
    "ReservationService",
    "SeatLedger",
    "SideEffects",
]
