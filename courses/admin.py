# courses/admin.py
from django.contrib import admin

from .models import Course, Enrollment, Lecture


class LectureInline(admin.TabularInline):
    model = Lecture
    extra = 1
    fields = ("title", "video_url", "free_preview", "order")


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ("title", "instructor", "price", "is_published", "created_at")
    list_filter = ("is_published",)
    search_fields = ("title", "instructor__email")
    inlines = [LectureInline]


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ("student", "course", "payment_status", "paid_amount", "enrolled_at")
    list_filter = ("payment_status",)
    search_fields = ("student__email", "course__title")
