from django.contrib import admin

from enrollments.models import CourseSection, CourseType, Enrollment, EnrollmentRequest, Promotion


class CourseSectionInline(admin.TabularInline):
    model = CourseSection
    extra = 1
    readonly_fields = ["seats_available"]


@admin.register(CourseType)
class CourseTypeAdmin(admin.ModelAdmin):
    list_display = ["name", "payment_modality", "state"]
    search_fields = ["name"]
    inlines = [CourseSectionInline]


@admin.register(CourseSection)
class CourseSectionAdmin(admin.ModelAdmin):
    list_display = ["name", "course_type", "schedule", "start_date", "capacity", "seats_available", "state"]
    list_filter = ["course_type", "state", "schedule"]
    readonly_fields = ["seats_available"]


@admin.register(Promotion)
class PromotionAdmin(admin.ModelAdmin):
    list_display = ["name", "principal_section", "promotional_section", "quota_used", "quota_limit", "active"]
    list_filter = ["active"]
    readonly_fields = ["quota_used"]


@admin.register(EnrollmentRequest)
class EnrollmentRequestAdmin(admin.ModelAdmin):
    list_display = ["code", "identification", "last_name", "section", "promotion", "state", "created_at"]
    list_filter = ["state", "course_type"]
    search_fields = ["code", "identification", "last_name", "proof_reference"]
    readonly_fields = ["state", "section", "promotion", "reviewer_id", "decided_at"]


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ["student_id", "section", "state", "created_at"]
    list_filter = ["state", "section__course_type"]
