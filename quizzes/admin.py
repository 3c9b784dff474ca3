# quizzes/admin.py
from django.contrib import admin

from .models import AttemptAnswer, Question, Quiz, QuizAttempt


class QuestionInline(admin.StackedInline):
    model = Question
    extra = 0
    fields = ("order", "question_type", "prompt", "options", "correct_answer", "points")


@admin.register(Quiz)
class QuizAdmin(admin.ModelAdmin):
    list_display = ("title", "course", "quiz_type", "lecture", "passing_score", "attempts_allowed", "is_active")
    list_filter = ("quiz_type", "is_active")
    search_fields = ("title", "course__title")
    inlines = [QuestionInline]


class AttemptAnswerInline(admin.TabularInline):
    model = AttemptAnswer
    extra = 0
    fields = ("question", "answer", "is_correct", "points_earned", "needs_review", "reviewed_by", "reviewed_at")
    readonly_fields = ("question", "answer")


@admin.register(QuizAttempt)
class QuizAttemptAdmin(admin.ModelAdmin):
    list_display = ("student", "quiz", "attempt_number", "status", "score", "passed", "started_at", "completed_at")
    list_filter = ("status", "passed")
    search_fields = ("student__email", "quiz__title")
    inlines = [AttemptAnswerInline]
