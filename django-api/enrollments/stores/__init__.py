from enrollments.stores.django_store import DjangoEnrollmentStore
from enrollments.stores.interfaces import EnrollmentStore

__all__ = ["EnrollmentStore", "DjangoEnrollmentStore"]
