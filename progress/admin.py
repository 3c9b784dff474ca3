from django.contrib import admin

from .models import CourseProgress, LectureProgress, QuizProgress


class LectureProgressInline(admin.TabularInline):
    model = LectureProgress
    extra = 0


class QuizProgressInline(admin.TabularInline):
    model = QuizProgress
    extra = 0


@admin.register(CourseProgress)
class CourseProgressAdmin(admin.ModelAdmin):
    list_display = ("student", "course", "progress_percentage", "completed", "completion_date")
    list_filter = ("completed",)
    search_fields = ("student__email", "course__title")
    inlines = [LectureProgressInline, QuizProgressInline]
