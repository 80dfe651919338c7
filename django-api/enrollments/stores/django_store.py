"""Django ORM implementation of the EnrollmentStore."""

from contextlib import AbstractContextManager
from typing import Callable

from django.db import IntegrityError, transaction
from django.db.models import CharField, Count, Exists, F, OuterRef, Q
from django.db.models.functions import Cast, Coalesce
from django.utils import timezone

from enrollments import models as orm
from enrollments.domain import (
    Applicant,
    CourseType,
    Enrollment,
    EnrollmentPayload,
    EnrollmentRequest,
    EnrollmentState,
    Occupancy,
    PaymentMethod,
    PaymentModality,
    Promotion,
    RequestState,
    Section,
    SectionState,
)
from enrollments.domain.errors import DuplicateProofReferenceError, PersistenceError
from enrollments.domain.states import SEAT_HOLDING_STATES
from enrollments.stores.interfaces import EnrollmentStore

HOLDING = [state.value for state in SEAT_HOLDING_STATES]


def to_course_type(row: orm.CourseType) -> CourseType:
    return CourseType(
        id=row.pk,
        name=row.name,
        active=row.state == SectionState.ACTIVE.value,
        payment_modality=PaymentModality(row.payment_modality),
        session_count=row.session_count,
        session_price=row.session_price,
        requires_certificate=row.requires_certificate,
    )


def to_section(row: orm.CourseSection) -> Section:
    return Section(
        id=row.pk,
        course_type_id=row.course_type_id,
        name=row.name,
        capacity=row.capacity,
        seats_available=row.seats_available,
        schedule=row.schedule,
        start_date=row.start_date,
        state=SectionState(row.state),
    )


def to_promotion(row: orm.Promotion) -> Promotion:
    return Promotion(
        id=row.pk,
        name=row.name,
        principal_section_id=row.principal_section_id,
        promotional_section_id=row.promotional_section_id,
        quota_limit=row.quota_limit,
        quota_used=row.quota_used,
        active=row.active,
        valid_from=row.valid_from,
        valid_to=row.valid_to,
    )


def to_request(row: orm.EnrollmentRequest) -> EnrollmentRequest:
    return EnrollmentRequest(
        id=row.pk,
        code=row.code,
        applicant=Applicant(
            identification=row.identification,
            first_name=row.first_name,
            last_name=row.last_name,
            email=row.email,
            phone=row.phone,
            existing_student_id=row.existing_student_id,
        ),
        course_type_id=row.course_type_id,
        section_id=row.section_id,
        promotion_id=row.promotion_id,
        state=RequestState(row.state),
        amount=row.amount,
        payment_method=PaymentMethod(row.payment_method),
        proof_reference=row.proof_reference,
        reviewer_id=row.reviewer_id,
        notes=row.notes,
        created_at=row.created_at,
        updated_at=row.updated_at,
        decided_at=row.decided_at,
    )


def to_enrollment(row: orm.Enrollment) -> Enrollment:
    return Enrollment(
        id=row.pk,
        student_id=row.student_id,
        section_id=row.section_id,
        request_id=row.request_id,
        state=EnrollmentState(row.state),
    )


class DjangoEnrollmentStore(EnrollmentStore):
    """Relational enrollment store using Django ORM."""

    def atomic(self) -> AbstractContextManager:
        return transaction.atomic()

    def on_commit(self, callback: Callable[[], None]) -> None:
        transaction.on_commit(callback, robust=True)

    def get_course_type(self, course_type_id: int) -> CourseType | None:
        row = orm.CourseType.objects.filter(pk=course_type_id).first()
        return to_course_type(row) if row else None

    def get_section(self, section_id: int) -> Section | None:
        row = orm.CourseSection.objects.filter(pk=section_id).first()
        return to_section(row) if row else None

    def find_best_section(self, course_type_id: int, schedule: str) -> Section | None:
        row = (
            orm.CourseSection.objects.filter(
                course_type_id=course_type_id,
                schedule=schedule,
                state=SectionState.ACTIVE.value,
                seats_available__gt=0,
            )
            .order_by("start_date", "id")
            .first()
        )
        return to_section(row) if row else None

    def list_available_sections(self) -> list[Section]:
        rows = orm.CourseSection.objects.filter(
            state=SectionState.ACTIVE.value,
            seats_available__gt=0,
        ).order_by("course_type_id", "schedule", "start_date", "id")
        return [to_section(row) for row in rows]

    def list_section_ids(self) -> list[int]:
        return list(orm.CourseSection.objects.order_by("id").values_list("id", flat=True))

    def get_promotion(self, promotion_id: int) -> Promotion | None:
        row = orm.Promotion.objects.filter(pk=promotion_id).first()
        return to_promotion(row) if row else None

    def try_reserve_seat(self, section_id: int) -> bool:
        updated = orm.CourseSection.objects.filter(
            pk=section_id,
            seats_available__gt=0,
        ).update(seats_available=F("seats_available") - 1)
        return updated == 1

    def release_seat(self, section_id: int) -> None:
        orm.CourseSection.objects.filter(
            pk=section_id,
            seats_available__lt=F("capacity"),
        ).update(seats_available=F("seats_available") + 1)

    def count_occupancy(self, section_id: int) -> Occupancy:
        requests = orm.EnrollmentRequest.objects.filter(state__in=HOLDING)
        enrolled = orm.Enrollment.objects.filter(section_id=section_id).filter(
            Q(request_id=OuterRef("pk"))
            | Q(student_id=OuterRef("student_key"), state=EnrollmentState.ACTIVE.value)
        )
        awaiting = (
            orm.EnrollmentRequest.objects.filter(
                section_id=section_id,
                state=RequestState.APPROVED.value,
            )
            .annotate(
                student_key=Coalesce(
                    Cast("existing_student_id", output_field=CharField()), "identification"
                )
            )
            .exclude(Exists(enrolled))
        )
        return Occupancy(
            pending_principal=requests.filter(section_id=section_id).count(),
            pending_promotional=requests.filter(
                promotion__promotional_section_id=section_id
            ).count(),
            active_enrollments=orm.Enrollment.objects.filter(
                section_id=section_id,
                state=EnrollmentState.ACTIVE.value,
            ).count(),
            awaiting_enrollment=awaiting.count(),
        )

    def write_seats_available(self, section_id: int, seats: int) -> None:
        orm.CourseSection.objects.filter(pk=section_id).update(seats_available=seats)

    def try_consume_quota(self, promotion_id: int) -> bool:
        updated = (
            orm.Promotion.objects.filter(pk=promotion_id)
            .filter(Q(quota_limit__isnull=True) | Q(quota_used__lt=F("quota_limit")))
            .update(quota_used=F("quota_used") + 1)
        )
        return updated == 1

    def proof_reference_exists(self, proof_reference: str) -> bool:
        return orm.EnrollmentRequest.objects.filter(proof_reference=proof_reference).exists()

    def insert_request(
        self,
        payload: EnrollmentPayload,
        *,
        code: str,
        section_id: int,
        proof_reference: str | None,
    ) -> EnrollmentRequest:
        applicant, payment, attachments = payload.applicant, payload.payment, payload.attachments
        try:
            with transaction.atomic():
                row = orm.EnrollmentRequest.objects.create(
                    code=code,
                    identification=applicant.identification.strip(),
                    first_name=applicant.first_name,
                    last_name=applicant.last_name,
                    email=applicant.email,
                    phone=applicant.phone,
                    existing_student_id=applicant.existing_student_id,
                    emergency_contact=payload.emergency_contact,
                    course_type_id=payload.course_type_id,
                    schedule=payload.schedule,
                    section_id=section_id,
                    promotion_id=payload.promotion_id,
                    amount=payment.amount,
                    payment_method=payment.method.value,
                    proof_reference=proof_reference,
                    bank=payment.bank,
                    transfer_date=payment.transfer_date,
                    received_by=payment.received_by.strip().upper(),
                    payment_proof_ref=attachments.payment_proof,
                    identity_document_ref=attachments.identity_document,
                    legal_status_document_ref=attachments.legal_status_document,
                    certificate_ref=attachments.certificate,
                    state=RequestState.PENDING.value,
                )
        except IntegrityError as exc:
            if proof_reference and "proof_reference" in str(exc):
                raise DuplicateProofReferenceError(proof_reference) from exc
            raise PersistenceError("Could not store enrollment request", code=code) from exc
        return to_request(row)

    def get_request(self, request_id: int, *, for_update: bool = False) -> EnrollmentRequest | None:
        queryset = orm.EnrollmentRequest.objects.all()
        if for_update:
            queryset = queryset.select_for_update()
        row = queryset.filter(pk=request_id).first()
        return to_request(row) if row else None

    def transition_request(
        self,
        request_id: int,
        *,
        sources: frozenset[RequestState],
        target: RequestState,
        reviewer_id: str | None,
        notes: str | None,
    ) -> bool:
        now = timezone.now()
        changes = {"state": target.value, "reviewer_id": reviewer_id, "updated_at": now}
        if notes is not None:
            changes["notes"] = notes
        if target.is_terminal:
            changes["decided_at"] = now
        updated = orm.EnrollmentRequest.objects.filter(
            pk=request_id,
            state__in=[state.value for state in sources],
        ).update(**changes)
        return updated == 1

    def set_request_promotion(self, request_id: int, promotion_id: int | None) -> None:
        orm.EnrollmentRequest.objects.filter(pk=request_id).update(
            promotion_id=promotion_id,
            updated_at=timezone.now(),
        )

    def list_requests(
        self,
        *,
        state: RequestState | None,
        course_type_id: int | None,
        offset: int,
        limit: int,
    ) -> tuple[list[EnrollmentRequest], int]:
        queryset = orm.EnrollmentRequest.objects.all()
        if state is not None:
            queryset = queryset.filter(state=state.value)
        if course_type_id is not None:
            queryset = queryset.filter(course_type_id=course_type_id)
        total = queryset.count()
        rows = queryset.order_by("-created_at", "-id")[offset : offset + limit]
        return [to_request(row) for row in rows], total

    def count_requests_by_state(self, course_type_id: int | None = None) -> dict[RequestState, int]:
        queryset = orm.EnrollmentRequest.objects.all()
        if course_type_id is not None:
            queryset = queryset.filter(course_type_id=course_type_id)
        counts = {state: 0 for state in RequestState}
        for row in queryset.values("state").annotate(total=Count("id")).order_by():
            counts[RequestState(row["state"])] = row["total"]
        return counts

    def has_active_enrollment(self, student_id: str, section_id: int) -> bool:
        return orm.Enrollment.objects.filter(
            student_id=student_id,
            section_id=section_id,
            state=EnrollmentState.ACTIVE.value,
        ).exists()

    def has_active_enrollment_in_course_type(self, student_id: str, course_type_id: int) -> bool:
        return orm.Enrollment.objects.filter(
            student_id=student_id,
            section__course_type_id=course_type_id,
            state=EnrollmentState.ACTIVE.value,
        ).exists()

    def create_enrollment(
        self, *, student_id: str, section_id: int, request_id: int
    ) -> Enrollment:
        row = orm.Enrollment.objects.create(
            student_id=student_id,
            section_id=section_id,
            request_id=request_id,
            state=EnrollmentState.ACTIVE.value,
        )
        return to_enrollment(row)
